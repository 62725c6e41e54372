"""
Exceptions raised by the two-step login core.

Ordinary authentication failures never raise; they come back as a falsy
AuthenticationResult. Only host integration faults end up here.
"""

from django.core.exceptions import ImproperlyConfigured


class TwoFactorConfigurationError(ImproperlyConfigured):
    """The host project is wired up in a way the login flow cannot run in."""
