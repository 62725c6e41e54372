"""
Remembered devices.

A device that completed the second factor with "remember" ticked gets a
long-lived cookie holding the user's secret, encrypted with the same box
as staged credentials. On later logins the flow compares it with the
user's current secret; rotating the secret therefore forgets every device.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

from django.http import HttpResponseBase

from .conf import CookieOptions
from .crypto import CryptoBox

logger = logging.getLogger("security")


class CookieJar:
    """
    Cookie read/write capability for one request.

    Reads come from the incoming request. Writes are buffered and flushed
    onto the response with ``apply()`` by whoever builds the response.
    """

    def __init__(self, cookies: Mapping[str, str] | None = None):
        self._cookies = dict(cookies or {})
        self._pending: dict[str, tuple[str, dict[str, Any]]] = {}

    @classmethod
    def from_request(cls, request) -> "CookieJar":
        return cls(request.COOKIES)

    def read(self, name: str) -> str | None:
        if name in self._pending:
            return self._pending[name][0]
        return self._cookies.get(name)

    def write(self, name: str, value: str, **options: Any) -> None:
        self._pending[name] = (value, options)

    @property
    def pending(self) -> dict[str, tuple[str, dict[str, Any]]]:
        return dict(self._pending)

    def apply(self, response: HttpResponseBase) -> HttpResponseBase:
        for name, (value, options) in self._pending.items():
            response.set_cookie(name, value, **options)
        return response


class RememberedDeviceStore:
    """Issue and read the remembered-device cookie."""

    def __init__(self, cookies: CookieJar, options: CookieOptions, box: CryptoBox):
        self.cookies = cookies
        self.options = options
        self.box = box

    def read_secret(self) -> str | None:
        plaintext = self.box.decrypt(self.cookies.read(self.options.name))
        if plaintext is None:
            return None
        try:
            payload = json.loads(plaintext)
        except ValueError:
            logger.debug("Ignoring malformed remembered-device cookie")
            return None
        if not isinstance(payload, dict):
            return None
        secret = payload.get("secret")
        return secret if isinstance(secret, str) and secret else None

    def remember_secret(self, secret: str) -> None:
        value = self.box.encrypt(json.dumps({"secret": secret}))
        self.cookies.write(self.options.name, value, **self.options.as_kwargs())
