"""
Admin configuration for users.

The TOTP secret is never shown or editable in the admin. Staff can only
see whether two-step verification is on and switch it off for a user who
lost their authenticator.
"""

from django.contrib import admin, messages
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """User admin with two-step verification status."""

    list_display = ["username", "email", "two_factor_enabled", "is_active", "is_staff", "date_joined"]
    list_filter = ["is_staff", "is_superuser", "is_active"]
    ordering = ["-date_joined"]
    readonly_fields = ["two_factor_confirmed_at"]
    actions = ["reset_two_factor"]

    fieldsets = BaseUserAdmin.fieldsets + (
        ("Two-step verification", {"fields": ("two_factor_confirmed_at",)}),
    )

    @admin.display(boolean=True, description="Two-step")
    def two_factor_enabled(self, obj: User) -> bool:
        return obj.two_factor_enabled

    @admin.action(description="Reset two-step verification")
    def reset_two_factor(self, request, queryset):
        count = 0
        for user in queryset:
            if user.two_factor_enabled:
                user.disable_two_factor()
                count += 1
        self.message_user(request, f"Two-step verification reset for {count} user(s).", messages.SUCCESS)
