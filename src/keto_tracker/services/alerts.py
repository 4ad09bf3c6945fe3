"""User-facing alerts raised by the controller."""

import logging
from dataclasses import dataclass, field
from typing import Literal, Protocol

AlertLevel = Literal["info", "error"]

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Alert:
    """A message the user should see."""

    level: AlertLevel
    title: str
    message: str


class AlertSink(Protocol):
    """Destination for user alerts."""

    def publish(self, alert: Alert) -> None:
        """Deliver an alert."""


@dataclass
class RecordingAlertSink(AlertSink):
    """Keeps alerts until the HTTP layer hands them to the client."""

    alerts: list[Alert] = field(default_factory=list)

    def publish(self, alert: Alert) -> None:
        """Log and keep the alert."""
        log = _logger.warning if alert.level == "error" else _logger.info
        log("%s: %s", alert.title, alert.message)
        self.alerts.append(alert)

    def pop_all(self) -> list[Alert]:
        """Return pending alerts and forget them."""
        pending, self.alerts = self.alerts, []
        return pending
