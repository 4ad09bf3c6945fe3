"""Controllers for the users currently talking to the API."""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from keto_tracker.domain.sessions import AuthEvent
from keto_tracker.services.app_state import AppController

_logger = logging.getLogger(__name__)


@dataclass
class _Session:
    controller: AppController
    ready: asyncio.Task[None]
    last_used: float


@dataclass
class ControllerRegistry:
    """One ``AppController`` per signed-in user, created on first use.

    The registry lock only guards the session map. A user's first load runs
    as a task that later requests for the same user wait on, so one slow
    load never holds up other users. Sessions unused for ``idle_seconds``
    are evicted.
    """

    factory: Callable[[], AppController]
    idle_seconds: float = 3600.0
    clock: Callable[[], float] = time.monotonic
    _sessions: dict[str, _Session] = field(default_factory=dict)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    async def get(self, user_id: str) -> AppController:
        """Return the user's controller, loading their data on first use."""
        async with self._lock:
            self._evict_idle()
            session = self._sessions.get(user_id)
            if session is None:
                _logger.info("Starting session for user_id=%s", user_id)
                controller = self.factory()
                ready = asyncio.create_task(
                    controller.handle_auth_event(AuthEvent.INITIAL_SESSION, user_id)
                )
                session = _Session(controller, ready, self.clock())
                self._sessions[user_id] = session
            session.last_used = self.clock()
        try:
            await asyncio.shield(session.ready)
        except Exception:
            async with self._lock:
                if self._sessions.get(user_id) is session:
                    del self._sessions[user_id]
            raise
        return session.controller

    def drop(self, user_id: str) -> None:
        """Forget the user's controller."""
        self._sessions.pop(user_id, None)

    def __len__(self) -> int:
        return len(self._sessions)

    def _evict_idle(self) -> None:
        cutoff = self.clock() - self.idle_seconds
        idle = [
            user_id
            for user_id, session in self._sessions.items()
            if session.ready.done() and session.last_used < cutoff
        ]
        for user_id in idle:
            _logger.info("Evicting idle session for user_id=%s", user_id)
            del self._sessions[user_id]
