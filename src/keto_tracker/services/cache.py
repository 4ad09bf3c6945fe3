"""Cache for AI food lookups."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol

from keto_tracker.domain.assistant import FoodFound


class LookupCache(Protocol):
    """Cache interface for successful food lookups."""

    def get(self, query: str) -> FoodFound | None:
        """Return a cached lookup if present and not expired."""

    def put(self, query: str, result: FoodFound) -> None:
        """Store a lookup result."""


@dataclass
class _CacheEntry:
    result: FoodFound
    expires_at: datetime


@dataclass
class InMemoryLookupCache(LookupCache):
    """Process-local lookup cache keyed by the normalised query."""

    ttl_seconds: int = 3600
    _entries: dict[str, _CacheEntry] = field(default_factory=dict)

    def get(self, query: str) -> FoodFound | None:
        """Return a cached lookup if it hasn't expired."""
        key = _normalize(query)
        entry = self._entries.get(key)
        if entry is None:
            return None
        if datetime.now(tz=UTC) >= entry.expires_at:
            self._entries.pop(key, None)
            return None
        return entry.result

    def put(self, query: str, result: FoodFound) -> None:
        """Store a lookup result with the configured TTL."""
        expires_at = datetime.now(tz=UTC) + timedelta(seconds=self.ttl_seconds)
        self._entries[_normalize(query)] = _CacheEntry(
            result=result, expires_at=expires_at
        )


def _normalize(query: str) -> str:
    return " ".join(query.lower().split())
