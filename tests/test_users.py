"""
Tests for the user model, the default user finder and the admin.
"""

import pytest
from django.urls import reverse

from two_factor_auth.users import find_user


@pytest.mark.django_db
class TestUserModel:
    """Tests for the secret on the user model."""

    def test_new_user_has_no_second_factor(self, user):
        assert user.secret == ""
        assert not user.two_factor_enabled
        assert user.two_factor_confirmed_at is None

    def test_enable_and_disable(self, user, secret):
        user.enable_two_factor(secret)
        user.refresh_from_db()
        assert user.secret == secret
        assert user.two_factor_enabled
        assert user.two_factor_confirmed_at is not None

        user.disable_two_factor()
        user.refresh_from_db()
        assert user.secret == ""
        assert user.two_factor_confirmed_at is None


@pytest.mark.django_db
class TestFindUser:
    """Tests for matching primary credentials."""

    def test_match(self, two_factor_user, password, secret):
        record = find_user("bob", password)
        assert record["pk"] == two_factor_user.pk
        assert record["username"] == "bob"
        assert record["secret"] == secret
        assert "password" not in record

    def test_wrong_password(self, user):
        assert find_user("alice", "wrong") is None

    def test_unknown_user(self, db):
        assert find_user("nobody", "whatever") is None

    def test_inactive_user(self, create_user, password):
        create_user(username="carol", is_active=False)
        assert find_user("carol", password) is None


@pytest.mark.django_db
class TestAdmin:
    """Tests for the user admin."""

    def test_changelist_hides_secret(self, admin_client, two_factor_user, secret):
        response = admin_client.get(reverse("admin:users_user_changelist"))
        assert response.status_code == 200
        assert secret not in response.content.decode()

    def test_change_form_hides_secret(self, admin_client, two_factor_user, secret):
        response = admin_client.get(reverse("admin:users_user_change", args=[two_factor_user.pk]))
        assert response.status_code == 200
        assert secret not in response.content.decode()

    def test_reset_two_factor_action(self, admin_client, two_factor_user, user):
        response = admin_client.post(
            reverse("admin:users_user_changelist"),
            {"action": "reset_two_factor", "_selected_action": [two_factor_user.pk, user.pk]},
        )
        assert response.status_code == 302

        two_factor_user.refresh_from_db()
        assert not two_factor_user.two_factor_enabled
