"""
Tests for the second-factor decision.
"""

from unittest.mock import Mock

import pytest

from two_factor_auth.verifier import (
    INVALID_CODE_MESSAGE,
    TwoFactorVerifier,
    VerificationState,
    secrets_match,
)

SECRET = "JBSWY3DPEHPK3PXP"


@pytest.fixture
def verify_code():
    return Mock(side_effect=lambda secret, code: code == "123456")


@pytest.fixture
def verifier(verify_code):
    return TwoFactorVerifier(verify_code)


class TestTwoFactorVerifier:
    """Tests for each transition of the verifier."""

    def test_remembered_device_bypasses_code(self, verifier, verify_code):
        outcome = verifier.verify(SECRET, None, remember_enabled=True, remembered_secret=SECRET)
        assert outcome.state is VerificationState.BYPASSED_BY_REMEMBERED_DEVICE
        assert outcome.satisfied
        verify_code.assert_not_called()

    def test_remembered_device_bypasses_even_a_wrong_code(self, verifier):
        outcome = verifier.verify(SECRET, "000000", remember_enabled=True, remembered_secret=SECRET)
        assert outcome.state is VerificationState.BYPASSED_BY_REMEMBERED_DEVICE

    def test_remembered_device_ignored_when_remember_disabled(self, verifier):
        outcome = verifier.verify(SECRET, None, remember_enabled=False, remembered_secret=SECRET)
        assert outcome.state is VerificationState.PENDING_CODE_INPUT

    def test_remembered_secret_must_match_exactly(self, verifier):
        outcome = verifier.verify(SECRET, None, remember_enabled=True, remembered_secret=SECRET.lower())
        assert outcome.state is VerificationState.PENDING_CODE_INPUT

    def test_missing_code_is_pending_without_message(self, verifier, verify_code):
        outcome = verifier.verify(SECRET, None)
        assert outcome.state is VerificationState.PENDING_CODE_INPUT
        assert outcome.message is None
        assert not outcome.satisfied
        verify_code.assert_not_called()

    def test_valid_code(self, verifier, verify_code):
        outcome = verifier.verify(SECRET, "123456")
        assert outcome.state is VerificationState.VERIFIED
        assert outcome.satisfied
        verify_code.assert_called_once_with(SECRET, "123456")

    def test_invalid_code_is_rejected_with_message(self, verifier):
        outcome = verifier.verify(SECRET, "654321")
        assert outcome.state is VerificationState.REJECTED
        assert outcome.message == str(INVALID_CODE_MESSAGE)
        assert outcome.message == "Invalid two-step verification code."
        assert not outcome.satisfied

    def test_empty_code_is_checked_not_pending(self, verifier, verify_code):
        outcome = verifier.verify(SECRET, "")
        assert outcome.state is VerificationState.REJECTED
        verify_code.assert_called_once_with(SECRET, "")

    def test_requires_code_verifier(self):
        with pytest.raises(ValueError):
            TwoFactorVerifier(None)


class TestSecretsMatch:
    """Tests for the remembered secret comparison."""

    def test_equal(self):
        assert secrets_match(SECRET, SECRET)

    @pytest.mark.parametrize("remembered", [None, "", SECRET.lower(), SECRET + " ", SECRET[:-1]])
    def test_not_equal(self, remembered):
        assert not secrets_match(remembered, SECRET)
