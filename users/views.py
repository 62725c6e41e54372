"""
Views for login, two-step verification and its setup (Django templates).
"""

from django.conf import settings
from django.contrib import messages
from django.contrib.auth import get_user_model, login, logout
from django.contrib.auth.decorators import login_required
from django.shortcuts import redirect, render
from django.views.decorators.http import require_http_methods, require_POST

from core.security import audit_logger
from two_factor_auth.conf import get_settings
from two_factor_auth.flow import AuthenticationFlow, AuthenticationResult
from two_factor_auth.otp import generate_secret, provisioning_uri
from two_factor_auth.verifier import VerificationState

from .forms import LoginForm, SetupForm, VerifyForm

User = get_user_model()

# extra_tags of second-factor error messages
FLASH_TAG = "two-factor-auth"

# Encrypted secret waiting for its first code on the setup page
SETUP_SESSION_KEY = "TwoFactorAuth.setup_secret"

VERIFIED_VIA = {
    None: "password",
    VerificationState.VERIFIED: "one_time_code",
    VerificationState.BYPASSED_BY_REMEMBERED_DEVICE: "remembered_device",
}


def apply_result(request, flow: AuthenticationFlow, result: AuthenticationResult):
    """
    Turn a flow result into a response.

    Returns None for a rejection so the caller can render its own error.
    """
    if result.step_up:
        if result.message:
            messages.error(request, result.message, extra_tags=FLASH_TAG)
        return redirect(result.redirect_url)

    if not result:
        return None

    user = User.objects.get(pk=result.user["pk"])
    login(request, user)
    audit_logger.log_login(user, request, via=VERIFIED_VIA.get(result.verification, "password"))
    return flow.cookies.apply(redirect(settings.LOGIN_REDIRECT_URL))


@require_http_methods(["GET", "POST"])
def login_view(request):
    """Primary credentials; hands over to the verify page when a code is needed."""
    if request.user.is_authenticated:
        return redirect(settings.LOGIN_REDIRECT_URL)

    if request.method == "POST":
        form = LoginForm(request.POST)
        flow = AuthenticationFlow.for_request(request)
        result = flow.authenticate(request.POST)
        response = apply_result(request, flow, result)
        if response is not None:
            return response
        audit_logger.log_login_failed(request, request.POST.get("username", ""))
        messages.error(request, "Invalid username or password.")
    else:
        form = LoginForm()

    return render(request, "users/login.html", {"form": form})


@require_http_methods(["GET", "POST"])
def verify_view(request):
    """Step-up page: asks for the one-time code of a staged login."""
    flow = AuthenticationFlow.for_request(request)
    if flow.staging.unstage() is None:
        return redirect("users:login")

    if request.method == "POST":
        result = flow.authenticate(request.POST)
        response = apply_result(request, flow, result)
        if response is not None:
            return response
        # Staged credentials stopped matching, e.g. the password was changed meanwhile
        flow.staging.clear()
        audit_logger.log_login_failed(request)
        messages.error(request, "Your sign-in has expired. Please sign in again.")
        return redirect("users:login")

    form = VerifyForm()
    return render(request, "users/verify.html", {
        "form": form,
        "remember_enabled": flow.config.remember,
    })


@login_required
@require_http_methods(["GET", "POST"])
def setup_view(request):
    """Turn on two-step verification for the logged-in user."""
    user = request.user
    box = get_settings().box

    secret = box.decrypt(request.session.get(SETUP_SESSION_KEY))
    if not secret:
        secret = generate_secret()
        request.session[SETUP_SESSION_KEY] = box.encrypt(secret)

    if request.method == "POST":
        form = SetupForm(secret, request.POST)
        if form.is_valid():
            user.enable_two_factor(secret)
            request.session.pop(SETUP_SESSION_KEY, None)
            audit_logger.log_two_factor_enabled(user, request)
            messages.success(request, "Two-step verification enabled.")
            return redirect(settings.LOGIN_REDIRECT_URL)
    else:
        form = SetupForm(secret)

    return render(request, "users/setup.html", {
        "form": form,
        "secret": secret,
        "provisioning_uri": provisioning_uri(
            secret,
            name=user.get_username(),
            issuer_name=getattr(settings, "TWO_FACTOR_AUTH_ISSUER", "Two-Step Login"),
        ),
        "is_enabled": user.two_factor_enabled,
    })


@require_POST
def logout_view(request):
    if request.user.is_authenticated:
        audit_logger.log_logout(request.user, request)
    logout(request)
    return redirect(settings.LOGOUT_REDIRECT_URL)
