"""Error translation for Supabase queries."""

import logging
from typing import Any

import httpx
from postgrest.exceptions import APIError

from keto_tracker.errors import RemoteStoreError

_logger = logging.getLogger(__name__)


def execute(query: Any, action: str) -> Any:
    """Run a PostgREST query, raising ``RemoteStoreError`` on failure."""
    try:
        return query.execute()
    except APIError as exc:
        _logger.warning("Supabase %s failed: %s", action, exc.message)
        raise RemoteStoreError(f"{action} failed: {exc.message}") from exc
    except httpx.HTTPError as exc:
        _logger.warning("Supabase %s transport error: %s", action, exc)
        raise RemoteStoreError(f"{action} failed: {exc}") from exc
