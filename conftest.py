"""
Pytest fixtures for the two-step login tests.
"""

import pyotp
import pytest
from django.contrib.auth import get_user_model

from two_factor_auth.conf import get_settings

User = get_user_model()

PASSWORD = "SecureP@ssw0rd123!"


@pytest.fixture(autouse=True)
def fresh_two_factor_settings():
    """Drop cached TWO_FACTOR_AUTH settings so each test sees its own overrides."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def password():
    return PASSWORD


@pytest.fixture
def create_user(db):
    """Factory fixture to create users."""
    def _create_user(username="alice", password=PASSWORD, **kwargs):
        return User.objects.create_user(username=username, password=password, **kwargs)
    return _create_user


@pytest.fixture
def user(create_user):
    """User without two-step verification."""
    return create_user()


@pytest.fixture
def secret():
    return pyotp.random_base32()


@pytest.fixture
def two_factor_user(create_user, secret):
    """User with two-step verification turned on."""
    return create_user(username="bob", secret=secret)


@pytest.fixture
def current_code(secret):
    """Return a function producing the current TOTP code for ``secret``."""
    return lambda: pyotp.TOTP(secret).now()
