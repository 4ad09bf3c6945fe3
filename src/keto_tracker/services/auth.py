"""Identity provider interface."""

from typing import Protocol


class AuthGateway(Protocol):
    """Verifies access tokens and ends sessions."""

    def verify_token(self, access_token: str) -> str:
        """Return the user id for a valid token.

        Raises ``AuthenticationError`` otherwise.
        """

    def sign_out(self, access_token: str) -> None:
        """Revoke the session behind the token."""
