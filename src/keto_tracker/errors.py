"""Error types shared across services and adapters."""


class RemoteStoreError(RuntimeError):
    """Raised when a Supabase read or write fails."""


class AssistantError(RuntimeError):
    """Raised when an AI endpoint fails or returns nothing usable."""


class AuthenticationError(RuntimeError):
    """Raised when a request carries no valid session."""
