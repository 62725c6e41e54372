"""
Django forms for the login pages.

The forms render the pages and validate the setup step. Login and
verification posts are read by the two-step flow itself, so the field
names here match the default TWO_FACTOR_AUTH["FIELDS"].
"""

from django import forms

from two_factor_auth.conf import get_settings


class LoginForm(forms.Form):
    """Primary credentials."""

    username = forms.CharField(
        max_length=150,
        widget=forms.TextInput(attrs={
            "class": "form-input",
            "placeholder": "Username",
            "autocomplete": "username",
            "autofocus": True,
        }),
    )
    password = forms.CharField(
        widget=forms.PasswordInput(attrs={
            "class": "form-input",
            "placeholder": "••••••••",
            "autocomplete": "current-password",
        }),
    )


class VerifyForm(forms.Form):
    """One-time code on the step-up page."""

    code = forms.CharField(
        label="Verification code",
        max_length=10,
        widget=forms.TextInput(attrs={
            "class": "form-input",
            "inputmode": "numeric",
            "autocomplete": "one-time-code",
            "placeholder": "123456",
            "autofocus": True,
        }),
    )
    remember = forms.BooleanField(
        required=False,
        label="Don't ask again on this device",
        widget=forms.CheckboxInput(attrs={"class": "form-checkbox"}),
    )


class SetupForm(forms.Form):
    """Confirm a freshly generated secret with a code from the authenticator."""

    code = forms.CharField(
        label="Verification code",
        max_length=10,
        widget=forms.TextInput(attrs={
            "class": "form-input",
            "inputmode": "numeric",
            "autocomplete": "one-time-code",
        }),
    )

    def __init__(self, secret, *args, **kwargs):
        self.secret = secret
        super().__init__(*args, **kwargs)

    def clean_code(self):
        code = self.cleaned_data.get("code", "")
        if not get_settings().code_verifier(self.secret, code):
            raise forms.ValidationError("Invalid code. Please try again.")
        return code
