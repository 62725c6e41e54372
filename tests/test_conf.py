"""
Tests for TWO_FACTOR_AUTH settings resolution.
"""

from datetime import timedelta

import pytest

from two_factor_auth import otp, users
from two_factor_auth.conf import get_settings, load_settings
from two_factor_auth.crypto import CryptoBox
from two_factor_auth.exceptions import TwoFactorConfigurationError


class TestDefaults:
    """Defaults when the project configures nothing."""

    def test_field_names(self):
        config = load_settings()
        assert config.fields.username == "username"
        assert config.fields.password == "password"
        assert config.fields.secret == "secret"
        assert config.fields.remember == "remember"
        assert config.fields.code == "code"

    def test_remember_is_off(self):
        assert load_settings().remember is False

    def test_cookie(self):
        cookie = load_settings().cookie
        assert cookie.name == "TwoFactorAuth"
        assert cookie.httponly is True
        assert cookie.max_age == 30 * 24 * 60 * 60
        assert cookie.samesite == "Lax"

    def test_verify_action(self):
        assert load_settings().verify_action.url_name == "users:verify"

    def test_capabilities(self):
        config = load_settings()
        assert config.code_verifier is otp.verify_code
        assert config.user_finder is users.find_user


class TestOverrides:
    """Project overrides merged over the defaults."""

    def test_nested_override_keeps_other_keys(self):
        config = load_settings({"COOKIE": {"NAME": "trusted"}})
        assert config.cookie.name == "trusted"
        assert config.cookie.httponly is True

    def test_expires_as_timedelta_or_seconds(self):
        assert load_settings({"COOKIE": {"EXPIRES": timedelta(days=7)}}).cookie.max_age == 604800
        assert load_settings({"COOKIE": {"EXPIRES": 3600}}).cookie.max_age == 3600

    @pytest.mark.parametrize("expires", ["+30 days", None, True])
    def test_bad_expires(self, expires):
        with pytest.raises(TwoFactorConfigurationError):
            load_settings({"COOKIE": {"EXPIRES": expires}})

    def test_secure_follows_session_cookie(self, settings):
        settings.SESSION_COOKIE_SECURE = True
        assert load_settings().cookie.secure is True
        assert load_settings({"COOKIE": {"SECURE": False}}).cookie.secure is False

    def test_verify_action_with_prefix(self):
        config = load_settings({"VERIFY_ACTION": {"PREFIX": "admin", "CONTROLLER": "accounts", "ACTION": "two_step"}})
        assert config.verify_action.url_name == "admin:accounts:two_step"

    def test_verify_action_without_controller(self):
        config = load_settings({"VERIFY_ACTION": {"CONTROLLER": None, "ACTION": "verify"}})
        assert config.verify_action.url_name == "verify"

    def test_callables_are_accepted(self):
        def verify(secret, code):
            return True

        assert load_settings({"CODE_VERIFIER": verify}).code_verifier is verify

    def test_unknown_option(self):
        with pytest.raises(TwoFactorConfigurationError):
            load_settings({"REMEMBER_ME": True})

    def test_unknown_nested_option(self):
        with pytest.raises(TwoFactorConfigurationError):
            load_settings({"COOKIE": {"DOMAIN": "example.com"}})

    def test_nested_option_must_be_dict(self):
        with pytest.raises(TwoFactorConfigurationError):
            load_settings({"COOKIE": "TwoFactorAuth"})

    def test_bad_dotted_path(self):
        with pytest.raises(TwoFactorConfigurationError):
            load_settings({"CODE_VERIFIER": "two_factor_auth.otp.does_not_exist"})


class TestEncryptionKey:
    """Key selection for staged credentials and cookies."""

    def test_falls_back_to_secret_key(self, settings):
        token = load_settings().box.encrypt("value")
        settings.SECRET_KEY = "a-different-secret-key"
        assert load_settings().box.decrypt(token) is None

    def test_explicit_key_ignores_secret_key(self, settings):
        token = load_settings({"ENCRYPTION_KEY": "explicit"}).box.encrypt("value")
        settings.SECRET_KEY = "a-different-secret-key"
        assert load_settings({"ENCRYPTION_KEY": "explicit"}).box.decrypt(token) == "value"

    def test_key_list_allows_rotation(self):
        token = load_settings({"ENCRYPTION_KEY": "old"}).box.encrypt("value")
        assert load_settings({"ENCRYPTION_KEY": ["new", "old"]}).box.decrypt(token) == "value"

    @pytest.mark.parametrize("blank", ["", b"", [], [""], ("", None)])
    def test_blank_key_falls_back_to_secret_key(self, settings, blank):
        settings.SECRET_KEY = "some-secret"
        token = load_settings().box.encrypt("value")
        assert load_settings({"ENCRYPTION_KEY": blank}).box.decrypt(token) == "value"

    def test_blank_entries_are_skipped(self):
        token = load_settings({"ENCRYPTION_KEY": "old"}).box.encrypt("value")
        assert load_settings({"ENCRYPTION_KEY": ["", "old"]}).box.decrypt(token) == "value"

    def test_not_shared_with_field_encryption(self, settings):
        """Staged credentials cannot be read with the FERNET_KEYS at-rest key."""
        field_box = CryptoBox(settings.FERNET_KEYS)
        flow_box = load_settings().box
        assert field_box.decrypt(flow_box.encrypt("value")) is None
        assert flow_box.decrypt(field_box.encrypt("value")) is None


class TestCaching:
    """get_settings() is resolved once and refreshed on setting changes."""

    def test_cached(self):
        assert get_settings() is get_settings()

    def test_reloaded_when_setting_changes(self, settings):
        before = get_settings()
        settings.TWO_FACTOR_AUTH = {"REMEMBER": True}
        after = get_settings()
        assert after is not before
        assert after.remember is True
