"""
Serializers for the login API.
"""

from django.contrib.auth import get_user_model
from rest_framework import serializers

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Public view of a logged-in user. Never includes the secret."""

    two_factor_enabled = serializers.BooleanField(read_only=True)

    class Meta:
        model = User
        fields = ["id", "username", "email", "first_name", "last_name", "two_factor_enabled"]
        read_only_fields = fields
