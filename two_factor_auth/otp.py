"""
Default one-time code capability, backed by pyotp (RFC 6238 TOTP).
"""

from __future__ import annotations

import pyotp

# Accept the previous and next 30-second step to absorb clock drift
VALID_WINDOW = 1


def verify_code(secret: str, code: str) -> bool:
    """Check a TOTP code against a base32 secret."""
    code = (code or "").strip().replace(" ", "")
    if not code.isdigit():
        return False
    try:
        return pyotp.TOTP(secret).verify(code, valid_window=VALID_WINDOW)
    except (TypeError, ValueError):
        # binascii.Error is a ValueError: the stored secret is not base32
        return False


def generate_secret() -> str:
    return pyotp.random_base32()


def provisioning_uri(secret: str, name: str, issuer_name: str) -> str:
    """otpauth:// URI for authenticator apps."""
    return pyotp.TOTP(secret).provisioning_uri(name=name, issuer_name=issuer_name)
