"""
URL configuration for the two-step login project.
"""

from django.contrib import admin
from django.contrib.auth.decorators import login_required
from django.urls import include, path
from django.views.generic import TemplateView

urlpatterns = [
    # Admin
    path("admin/", admin.site.urls),

    # Apps
    path("accounts/", include("users.urls")),
    path("api/accounts/", include("users.api_urls")),

    # Home
    path("", login_required(TemplateView.as_view(template_name="home.html")), name="home"),
]
