"""
Two-step login orchestration.

A login attempt goes through the same ``authenticate()`` call on the login
form and on the step-up page:

1. Username and password come from the posted data, or from the session
   when the step-up page only posts a code.
2. Primary credentials are matched with the configured find-user callable.
3. Users without a secret are done. For the others the credentials are
   (re)staged and the second factor is checked.
4. A missing or wrong code produces a step-up result pointing back to the
   verify page. A wrong code also carries a message for the user.
5. On success the staged credentials are dropped, the device is remembered
   if asked to, and the user record is returned without its secret.

Failures are values, not exceptions: every rejection is a falsy
``AuthenticationResult``. Only wiring mistakes raise.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable

from django.urls import NoReverseMatch, reverse

from core.security import hash_sensitive_data

from .conf import TwoFactorAuthSettings, get_settings
from .exceptions import TwoFactorConfigurationError
from .remember import CookieJar, RememberedDeviceStore
from .staging import Credentials, CredentialStaging
from .verifier import TwoFactorVerifier, VerificationOutcome, VerificationState

logger = logging.getLogger("security")

FALSE_VALUES = ("", "0", "false", "off", "no")


class AuthStatus(str, enum.Enum):
    AUTHENTICATED = "authenticated"
    STEP_UP_REQUIRED = "step_up_required"
    REJECTED = "rejected"


@dataclass(frozen=True)
class AuthenticationResult:
    status: AuthStatus
    user: dict[str, Any] | None = None
    redirect_url: str | None = None
    message: str | None = None
    verification: VerificationState | None = None

    def __bool__(self) -> bool:
        return self.status is AuthStatus.AUTHENTICATED

    @property
    def step_up(self) -> bool:
        return self.status is AuthStatus.STEP_UP_REQUIRED

    @classmethod
    def rejected(cls) -> "AuthenticationResult":
        return cls(AuthStatus.REJECTED)


def is_truthy(value: Any) -> bool:
    """Interpret a posted checkbox or JSON flag."""
    if isinstance(value, str):
        return value.strip().lower() not in FALSE_VALUES
    return bool(value)


def build_verify_url(request, config: TwoFactorAuthSettings) -> str:
    """Absolute URL of the step-up page."""
    url_name = config.verify_action.url_name
    try:
        path = reverse(url_name)
    except NoReverseMatch as exc:
        raise TwoFactorConfigurationError(
            f"VERIFY_ACTION '{url_name}' does not match any URL pattern"
        ) from exc
    return request.build_absolute_uri(path)


class AuthenticationFlow:
    """
    Login state machine for one request.

    Args:
        config: resolved TWO_FACTOR_AUTH settings
        find_user: ``(username, password) -> dict | None``
        verifier: second-factor decision
        staging: encrypted credential storage in the session
        devices: remembered-device cookie store
        verify_url: where step-up results send the client
    """

    def __init__(
        self,
        config: TwoFactorAuthSettings,
        find_user: Callable[[str, str], dict | None],
        verifier: TwoFactorVerifier,
        staging: CredentialStaging,
        devices: RememberedDeviceStore,
        verify_url: str,
    ):
        collaborators = {
            "config": config,
            "find_user": find_user,
            "verifier": verifier,
            "staging": staging,
            "devices": devices,
            "verify_url": verify_url,
        }
        missing = [name for name, value in collaborators.items() if value is None or value == ""]
        if missing:
            raise TwoFactorConfigurationError(
                f"AuthenticationFlow is missing: {', '.join(missing)}"
            )
        self.config = config
        self.find_user = find_user
        self.verifier = verifier
        self.staging = staging
        self.devices = devices
        self.verify_url = verify_url

    @classmethod
    def for_request(cls, request, config: TwoFactorAuthSettings | None = None) -> "AuthenticationFlow":
        """Wire a flow to a Django request's session and cookies."""
        config = config or get_settings()
        session = getattr(request, "session", None)
        if session is None:
            raise TwoFactorConfigurationError(
                "Two-step login requires django.contrib.sessions.middleware.SessionMiddleware"
            )
        return cls(
            config=config,
            find_user=partial(config.user_finder, request=request),
            verifier=TwoFactorVerifier(config.code_verifier),
            staging=CredentialStaging(session, config.box),
            devices=RememberedDeviceStore(CookieJar.from_request(request), config.cookie, config.box),
            verify_url=build_verify_url(request, config),
        )

    @property
    def cookies(self) -> CookieJar:
        return self.devices.cookies

    def resolve_credentials(self, data: Mapping[str, Any]) -> Credentials | None:
        fields = self.config.fields
        values = {}
        for field, key in (("username", fields.username), ("password", fields.password)):
            value = data.get(key)
            if not value or not isinstance(value, str):
                value = self.staging.staged_value(field)
            if not value or not isinstance(value, str):
                return None
            values[field] = value
        return Credentials(**values)

    def authenticate(self, data: Mapping[str, Any]) -> AuthenticationResult:
        # JSON bodies may be lists or scalars
        if not isinstance(data, Mapping):
            return AuthenticationResult.rejected()

        credentials = self.resolve_credentials(data)
        if credentials is None:
            return AuthenticationResult.rejected()

        user = self.find_user(credentials.username, credentials.password)
        if not user:
            return AuthenticationResult.rejected()

        secret_field = self.config.fields.secret
        secret = user.get(secret_field)
        verification = None
        if secret:
            self.staging.stage(credentials)

            outcome = self.verify_second_factor(secret, data)
            if not outcome.satisfied:
                if outcome.state is VerificationState.REJECTED:
                    logger.warning(
                        "Invalid two-step verification code",
                        extra={"username_hash": hash_sensitive_data(credentials.username)},
                    )
                else:
                    logger.info("Two-step verification required")
                return AuthenticationResult(
                    AuthStatus.STEP_UP_REQUIRED,
                    redirect_url=self.verify_url,
                    message=outcome.message,
                    verification=outcome.state,
                )

            if outcome.state is VerificationState.BYPASSED_BY_REMEMBERED_DEVICE:
                logger.info("Two-step verification satisfied by a remembered device")

            if self.config.remember and is_truthy(data.get(self.config.fields.remember)):
                self.devices.remember_secret(secret)
            verification = outcome.state

        self.staging.clear()

        record = dict(user)
        record.pop(secret_field, None)
        return AuthenticationResult(AuthStatus.AUTHENTICATED, user=record, verification=verification)

    def verify_second_factor(self, secret: str, data: Mapping[str, Any]) -> VerificationOutcome:
        code = data.get(self.config.fields.code)
        if code is not None and not isinstance(code, str):
            code = str(code)
        return self.verifier.verify(
            secret,
            code,
            remember_enabled=self.config.remember,
            remembered_secret=self.devices.read_secret() if self.config.remember else None,
        )
