"""
Security utilities shared by the login views and the two-step flow.
"""

import hashlib
import logging
from typing import Optional

from django.utils import timezone

logger = logging.getLogger('security')


# =============================================================================
# CLIENT IDENTIFICATION
# =============================================================================

# Known private/internal IP ranges (for filtering X-Forwarded-For)
PRIVATE_IP_PREFIXES = (
    '10.',
    '172.16.', '172.17.', '172.18.', '172.19.',
    '172.20.', '172.21.', '172.22.', '172.23.',
    '172.24.', '172.25.', '172.26.', '172.27.',
    '172.28.', '172.29.', '172.30.', '172.31.',
    '192.168.',
    '127.',
    '::1',
    'fc00:',
    'fe80:',
)


def is_private_ip(ip: str) -> bool:
    """Check if an IP address is private/internal."""
    if not ip:
        return True
    ip_lower = ip.lower().strip()
    if ip_lower in ('localhost', '', 'unknown'):
        return True
    return any(ip_lower.startswith(prefix) for prefix in PRIVATE_IP_PREFIXES)


def get_client_ip(request) -> str:
    """
    Extract client IP from request, skipping private proxy hops.

    X-Forwarded-For can be spoofed by clients, so only the first five hops
    are considered and the result is for logging, never for access control.
    """
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ips = [ip.strip() for ip in x_forwarded_for.split(',')][:5]

        for ip in ips:
            if ip and not is_private_ip(ip) and ('.' in ip or ':' in ip):
                return ip

        if ips and ips[0]:
            return ips[0]

    return request.META.get('REMOTE_ADDR', 'unknown')


def hash_sensitive_data(data: str) -> str:
    """Create a SHA-256 hash of sensitive data for logging (never log raw PII)."""
    return hashlib.sha256(data.encode()).hexdigest()[:16]


# =============================================================================
# AUDIT LOGGING
# =============================================================================

class AuditLogger:
    """
    Audit trail for authentication events.

    Usernames are hashed before they reach the log; only the user id of an
    authenticated user is recorded in clear.
    """

    def __init__(self):
        self.logger = logging.getLogger('audit')

    def log_action(
        self,
        action: str,
        user,
        request,
        details: Optional[dict] = None,
        success: bool = True,
    ):
        """Log an auditable action."""
        authenticated = bool(user is not None and getattr(user, 'is_authenticated', False))
        log_data = {
            'timestamp': timezone.now().isoformat(),
            'action': action,
            'user_id': user.pk if authenticated else None,
            'ip_address': get_client_ip(request),
            'user_agent': request.META.get('HTTP_USER_AGENT', '')[:200],
            'path': request.path,
            'method': request.method,
            'success': success,
            'details': details or {},
        }

        if success:
            self.logger.info(f"AUDIT: {action}", extra=log_data)
        else:
            self.logger.warning(f"AUDIT FAILED: {action}", extra=log_data)

    def log_login(self, user, request, success: bool = True, via: str = 'password'):
        """Log a completed login and the factor that finished it."""
        self.log_action('LOGIN', user, request, details={'via': via}, success=success)

    def log_login_failed(self, request, username: str = ''):
        """Log a rejected primary login without revealing the username."""
        self.log_action(
            'LOGIN_FAILED',
            None,
            request,
            details={'username_hash': hash_sensitive_data(username.strip().lower()) if username else None},
            success=False,
        )

    def log_logout(self, user, request):
        """Log logout."""
        self.log_action('LOGOUT', user, request)

    def log_two_factor_enabled(self, user, request):
        """Log a user turning on two-step verification."""
        self.log_action('TWO_FACTOR_ENABLED', user, request)


# Global audit logger instance
audit_logger = AuditLogger()
