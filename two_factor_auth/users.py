"""
Default find-user capability.

Matches primary credentials through Django's authentication backends and
hands the flow a plain dict, so the secret can be dropped from what is
returned without touching the model instance.
"""

from __future__ import annotations

from django.contrib.auth import authenticate
from django.forms.models import model_to_dict

EXCLUDED_FIELDS = ("password", "groups", "user_permissions")


def find_user(username: str, password: str, request=None) -> dict | None:
    user = authenticate(request, username=username, password=password)
    if user is None:
        return None
    record = model_to_dict(user, exclude=EXCLUDED_FIELDS)
    record["pk"] = user.pk
    return record
