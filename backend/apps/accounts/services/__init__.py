"""Service helpers for authentication and session lifetime."""

from .auth_client import (
    AuthClient,
    AuthError,
    AuthEvent,
    AuthSession,
    AuthUser,
    SessionExpired,
    Subscription,
    build_auth_client,
)
from .session_validator import (
    REFRESH_FAILED_WARNING,
    SESSION_EXPIRED_MESSAGE,
    SessionMonitor,
    SessionValidator,
)

__all__ = [
    "AuthClient",
    "AuthError",
    "AuthEvent",
    "AuthSession",
    "AuthUser",
    "SessionExpired",
    "Subscription",
    "build_auth_client",
    "REFRESH_FAILED_WARNING",
    "SESSION_EXPIRED_MESSAGE",
    "SessionMonitor",
    "SessionValidator",
]
