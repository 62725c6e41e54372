from django.apps import AppConfig


class TwoFactorAuthConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "two_factor_auth"
    verbose_name = "Two-step verification"

    def ready(self):
        # Connects the setting_changed receiver that drops cached settings
        from . import conf  # noqa: F401
