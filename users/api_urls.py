"""
API URL routes for the login endpoint.
"""

from django.urls import path

from . import api_views

app_name = "users_api"

urlpatterns = [
    path("login/", api_views.LoginAPIView.as_view(), name="login"),
]
