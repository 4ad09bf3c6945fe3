"""Supabase Auth gateway."""

import logging
from dataclasses import dataclass

import httpx
from supabase import Client
from supabase_auth.errors import AuthError

from keto_tracker.errors import AuthenticationError, RemoteStoreError
from keto_tracker.services.auth import AuthGateway

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseAuthGateway(AuthGateway):
    """Verifies access tokens with Supabase Auth."""

    client: Client

    def verify_token(self, access_token: str) -> str:
        """Return the user id behind the token."""
        if not access_token:
            raise AuthenticationError("Missing access token")
        try:
            response = self.client.auth.get_user(access_token)
        except AuthError as exc:
            raise AuthenticationError(f"Invalid access token: {exc.message}") from exc
        except httpx.HTTPError as exc:
            raise RemoteStoreError(f"verify token failed: {exc}") from exc
        if response is None or response.user is None:
            raise AuthenticationError("Invalid access token")
        return str(response.user.id)

    def sign_out(self, access_token: str) -> None:
        """Revoke the session behind the token."""
        try:
            self.client.auth.admin.sign_out(access_token)
        except AuthError as exc:
            raise AuthenticationError(f"Sign out failed: {exc.message}") from exc
        except httpx.HTTPError as exc:
            raise RemoteStoreError(f"sign out failed: {exc}") from exc
        _logger.info("Signed out session")
