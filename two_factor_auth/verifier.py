"""
Second-factor decision for a single request.

The verifier only decides. It does not redirect, flash or set cookies;
the flow turns its outcome into a result and the view applies that to
the response.
"""

from __future__ import annotations

import enum
import hmac
from dataclasses import dataclass
from typing import Callable

from django.utils.translation import gettext_lazy as _

INVALID_CODE_MESSAGE = _("Invalid two-step verification code.")


class VerificationState(str, enum.Enum):
    PENDING_CODE_INPUT = "pending_code_input"
    VERIFIED = "verified"
    REJECTED = "rejected"
    BYPASSED_BY_REMEMBERED_DEVICE = "bypassed_by_remembered_device"


@dataclass(frozen=True)
class VerificationOutcome:
    state: VerificationState
    message: str | None = None

    @property
    def satisfied(self) -> bool:
        return self.state in (
            VerificationState.VERIFIED,
            VerificationState.BYPASSED_BY_REMEMBERED_DEVICE,
        )


def secrets_match(remembered: str | None, secret: str) -> bool:
    """Exact, case-sensitive comparison in constant time."""
    if not remembered:
        return False
    return hmac.compare_digest(remembered.encode(), secret.encode())


class TwoFactorVerifier:
    """
    Decide whether the second factor is satisfied.

    Args:
        verify_code: ``(secret, code) -> bool`` one-time code check
    """

    def __init__(self, verify_code: Callable[[str, str], bool]):
        if verify_code is None:
            raise ValueError("TwoFactorVerifier needs a code verification callable")
        self.verify_code = verify_code

    def verify(
        self,
        secret: str,
        code: str | None,
        remember_enabled: bool = False,
        remembered_secret: str | None = None,
    ) -> VerificationOutcome:
        if remember_enabled and secrets_match(remembered_secret, secret):
            return VerificationOutcome(VerificationState.BYPASSED_BY_REMEMBERED_DEVICE)

        # First visit to the step-up page, nothing to complain about yet
        if code is None:
            return VerificationOutcome(VerificationState.PENDING_CODE_INPUT)

        if self.verify_code(secret, code):
            return VerificationOutcome(VerificationState.VERIFIED)

        return VerificationOutcome(VerificationState.REJECTED, str(INVALID_CODE_MESSAGE))
