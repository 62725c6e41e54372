"""
Symmetric encryption for values that leave the server process.

Staged credentials and remembered-device cookies are sealed with Fernet
(AES-CBC + HMAC-SHA256), so tampering is detected rather than decrypted
into garbage. Tokens are urlsafe base64 text and can be stored in the
session or a cookie as-is.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import logging
from typing import Iterable

from cryptography.fernet import Fernet, InvalidToken, MultiFernet

logger = logging.getLogger("security")

# Keeps keys derived from SECRET_KEY apart from the FERNET_KEYS dev key,
# which is the unprefixed SHA-256 of the same value
KEY_CONTEXT = b"two-factor-auth:"


def fernet_key(raw: str | bytes) -> bytes:
    """
    Return a Fernet key for ``raw``.

    A value that already is a Fernet key is used unchanged; anything else
    (typically SECRET_KEY) is stretched with SHA-256 into one, under the
    ``KEY_CONTEXT`` prefix.
    """
    if isinstance(raw, str):
        raw = raw.encode()
    try:
        if len(base64.urlsafe_b64decode(raw)) == 32:
            return raw
    except (binascii.Error, ValueError):
        pass
    return base64.urlsafe_b64encode(hashlib.sha256(KEY_CONTEXT + raw).digest())


class CryptoBox:
    """
    Encrypt and decrypt text with one or more keys.

    The first key encrypts; every key is tried on decryption, which allows
    rotating keys without invalidating sessions or cookies in flight.
    """

    def __init__(self, keys: Iterable[str | bytes]):
        fernets = [Fernet(fernet_key(key)) for key in keys]
        if not fernets:
            raise ValueError("CryptoBox needs at least one key")
        self._fernet = MultiFernet(fernets)

    def encrypt(self, value: str) -> str:
        return self._fernet.encrypt(value.encode()).decode()

    def decrypt(self, token: str | bytes | None) -> str | None:
        """Return the plaintext, or None for empty, foreign or tampered tokens."""
        if not token:
            return None
        if isinstance(token, str):
            token = token.encode()
        if not isinstance(token, bytes):
            return None
        try:
            value = self._fernet.decrypt(token).decode()
        except (InvalidToken, UnicodeDecodeError):
            logger.debug("Discarded a token that failed to decrypt")
            return None
        return value or None
