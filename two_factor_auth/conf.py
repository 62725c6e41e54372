"""
Settings for the two-step login flow.

Projects configure the flow with a ``TWO_FACTOR_AUTH`` dict in Django
settings, for example::

    TWO_FACTOR_AUTH = {
        "REMEMBER": True,
        "COOKIE": {"NAME": "trusted_device", "EXPIRES": timedelta(days=14)},
        "VERIFY_ACTION": {"CONTROLLER": "accounts", "ACTION": "two_step"},
    }

Nested dicts are merged key by key over ``DEFAULTS``, so overriding
``COOKIE["NAME"]`` keeps the other cookie flags. The merged settings are
resolved once and cached until Django reports a relevant setting change.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from typing import Any, Callable

from django.conf import settings
from django.core.signals import setting_changed
from django.dispatch import receiver
from django.utils.module_loading import import_string

from .crypto import CryptoBox
from .exceptions import TwoFactorConfigurationError

DEFAULTS: dict[str, Any] = {
    "FIELDS": {
        "USERNAME": "username",
        "PASSWORD": "password",
        "SECRET": "secret",
        "REMEMBER": "remember",
        "CODE": "code",
    },
    "REMEMBER": False,
    "COOKIE": {
        "NAME": "TwoFactorAuth",
        "HTTPONLY": True,
        "EXPIRES": timedelta(days=30),
        # None follows SESSION_COOKIE_SECURE
        "SECURE": None,
        "SAMESITE": "Lax",
    },
    "VERIFY_ACTION": {
        "PREFIX": None,
        "CONTROLLER": "users",
        "ACTION": "verify",
    },
    # None or blank falls back to SECRET_KEY
    "ENCRYPTION_KEY": None,
    "CODE_VERIFIER": "two_factor_auth.otp.verify_code",
    "USER_FINDER": "two_factor_auth.users.find_user",
}

# Settings whose change invalidates the cached configuration
WATCHED_SETTINGS = {"TWO_FACTOR_AUTH", "SECRET_KEY", "SESSION_COOKIE_SECURE"}


@dataclass(frozen=True)
class Fields:
    """Request and user-record field names."""

    username: str
    password: str
    secret: str
    remember: str
    code: str


@dataclass(frozen=True)
class CookieOptions:
    """Name and flags of the remembered-device cookie."""

    name: str
    httponly: bool
    max_age: int
    secure: bool
    samesite: str | None

    def as_kwargs(self) -> dict[str, Any]:
        return {
            "max_age": self.max_age,
            "httponly": self.httponly,
            "secure": self.secure,
            "samesite": self.samesite,
        }


@dataclass(frozen=True)
class VerifyAction:
    """Route of the step-up page, reversed as ``prefix:controller:action``."""

    prefix: str | None
    controller: str | None
    action: str

    @property
    def url_name(self) -> str:
        return ":".join(part for part in (self.prefix, self.controller, self.action) if part)


@dataclass(frozen=True)
class TwoFactorAuthSettings:
    fields: Fields
    remember: bool
    cookie: CookieOptions
    verify_action: VerifyAction
    box: CryptoBox
    code_verifier: Callable[[str, str], bool]
    user_finder: Callable[..., dict | None]


def _merge(defaults: dict[str, Any], overrides: dict[str, Any], path: str = "") -> dict[str, Any]:
    merged = dict(defaults)
    for key, value in overrides.items():
        if key not in defaults:
            raise TwoFactorConfigurationError(f"Unknown TWO_FACTOR_AUTH option: {path}{key}")
        if isinstance(defaults[key], dict):
            if not isinstance(value, dict):
                raise TwoFactorConfigurationError(f"TWO_FACTOR_AUTH option {path}{key} must be a dict")
            value = _merge(defaults[key], value, f"{path}{key}.")
        merged[key] = value
    return merged


def _expires_seconds(value: Any) -> int:
    if isinstance(value, timedelta):
        return int(value.total_seconds())
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    raise TwoFactorConfigurationError(
        f"COOKIE.EXPIRES must be a timedelta or a number of seconds, got {value!r}"
    )


def _import(path: Any, option: str) -> Callable:
    if callable(path):
        return path
    try:
        return import_string(path)
    except ImportError as exc:
        raise TwoFactorConfigurationError(f"Could not import {option} '{path}': {exc}") from exc


def _encryption_keys(value: Any) -> list[str | bytes]:
    if not isinstance(value, (list, tuple)):
        value = [value]
    keys = [key for key in value if key]
    if keys:
        return keys
    # Blank or missing ENCRYPTION_KEY
    return [settings.SECRET_KEY]


def load_settings(overrides: dict[str, Any] | None = None) -> TwoFactorAuthSettings:
    """Build the flow settings from DEFAULTS and ``overrides``."""
    raw = _merge(DEFAULTS, overrides or {})
    fields = raw["FIELDS"]
    cookie = raw["COOKIE"]
    action = raw["VERIFY_ACTION"]

    secure = cookie["SECURE"]
    if secure is None:
        secure = getattr(settings, "SESSION_COOKIE_SECURE", False)

    return TwoFactorAuthSettings(
        fields=Fields(
            username=fields["USERNAME"],
            password=fields["PASSWORD"],
            secret=fields["SECRET"],
            remember=fields["REMEMBER"],
            code=fields["CODE"],
        ),
        remember=bool(raw["REMEMBER"]),
        cookie=CookieOptions(
            name=cookie["NAME"],
            httponly=bool(cookie["HTTPONLY"]),
            max_age=_expires_seconds(cookie["EXPIRES"]),
            secure=bool(secure),
            samesite=cookie["SAMESITE"],
        ),
        verify_action=VerifyAction(
            prefix=action["PREFIX"],
            controller=action["CONTROLLER"],
            action=action["ACTION"],
        ),
        box=CryptoBox(_encryption_keys(raw["ENCRYPTION_KEY"])),
        code_verifier=_import(raw["CODE_VERIFIER"], "CODE_VERIFIER"),
        user_finder=_import(raw["USER_FINDER"], "USER_FINDER"),
    )


@lru_cache
def get_settings() -> TwoFactorAuthSettings:
    """Return the project's flow settings, resolved once per process."""
    return load_settings(getattr(settings, "TWO_FACTOR_AUTH", None))


@receiver(setting_changed)
def reload_settings(*, setting: str, **kwargs) -> None:
    if setting in WATCHED_SETTINGS:
        get_settings.cache_clear()
