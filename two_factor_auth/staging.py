"""
Holding primary credentials across the redirect to the step-up page.

The verify form only posts the one-time code. The username and password
accepted on the login form wait in the session, each field encrypted on
its own, so reading the session store alone does not reveal the password.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import MutableMapping

from .crypto import CryptoBox

SESSION_KEY = "TwoFactorAuth.credentials"

FIELDS = ("username", "password")


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


class CredentialStaging:
    """Encrypted credential payload kept under ``SESSION_KEY``."""

    def __init__(self, session: MutableMapping, box: CryptoBox):
        self.session = session
        self.box = box

    def stage(self, credentials: Credentials) -> dict[str, str]:
        payload = {field: self.box.encrypt(getattr(credentials, field)) for field in FIELDS}
        self.session[SESSION_KEY] = payload
        return payload

    def unstage(self) -> Credentials | None:
        """Decrypt the staged pair. Leaves the payload in place."""
        payload = self.session.get(SESSION_KEY)
        if not isinstance(payload, dict):
            return None
        values = {field: self.box.decrypt(payload.get(field)) for field in FIELDS}
        if not all(values.values()):
            return None
        return Credentials(**values)

    def staged_value(self, field: str) -> str | None:
        """Decrypt a single staged field."""
        payload = self.session.get(SESSION_KEY)
        if not isinstance(payload, dict):
            return None
        return self.box.decrypt(payload.get(field))

    def clear(self) -> None:
        self.session.pop(SESSION_KEY, None)
