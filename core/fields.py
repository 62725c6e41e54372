"""
Encrypted model fields for at-rest data protection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.core.signals import setting_changed
from django.db import models
from django.dispatch import receiver

from two_factor_auth.crypto import CryptoBox


@lru_cache
def _get_box() -> CryptoBox:
    keys = getattr(settings, "FERNET_KEYS", None)
    if not keys:
        raise ImproperlyConfigured("FERNET_KEYS is not configured")
    if isinstance(keys, (str, bytes)):
        keys = [keys]
    return CryptoBox(keys)


@receiver(setting_changed)
def _reset_box(*, setting: str, **kwargs) -> None:
    if setting == "FERNET_KEYS":
        _get_box.cache_clear()


class EncryptedCharField(models.CharField):
    """
    CharField encrypted with FERNET_KEYS, stored as text in the database.

    ``max_length`` bounds the plaintext; ciphertext is longer, hence TEXT.
    Values written before encryption was enabled are read back unchanged.
    """

    def db_type(self, connection) -> str:  # type: ignore[override]
        return models.TextField().db_type(connection)

    def get_prep_value(self, value: Any) -> Any:
        value = super().get_prep_value(value)
        if value in (None, ""):
            return value
        return _get_box().encrypt(str(value))

    def from_db_value(self, value: Any, expression, connection) -> Any:
        if value in (None, ""):
            return value
        decrypted = _get_box().decrypt(value)
        return value if decrypted is None else decrypted
