"""Domain models for authentication state."""

from enum import Enum


class AuthState(Enum):
    """Lifecycle of the signed-in user."""

    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"
    SIGNING_OUT = "signing_out"


class AuthEvent(Enum):
    """Auth change notifications from the identity provider."""

    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"
