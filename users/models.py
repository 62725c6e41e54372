"""
Custom User model carrying the two-step verification secret.
"""

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone

from core.fields import EncryptedCharField


class User(AbstractUser):
    """User whose login needs a one-time code whenever ``secret`` is set."""

    secret = EncryptedCharField(
        max_length=64,
        blank=True,
        default="",
        help_text="Base32-encoded TOTP secret; empty disables two-step verification",
    )

    two_factor_confirmed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When two-step verification was turned on",
    )

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"

    def __str__(self) -> str:
        return self.username

    @property
    def two_factor_enabled(self) -> bool:
        return bool(self.secret)

    def enable_two_factor(self, secret: str) -> None:
        self.secret = secret
        self.two_factor_confirmed_at = timezone.now()
        self.save(update_fields=["secret", "two_factor_confirmed_at"])

    def disable_two_factor(self) -> None:
        self.secret = ""
        self.two_factor_confirmed_at = None
        self.save(update_fields=["secret", "two_factor_confirmed_at"])
