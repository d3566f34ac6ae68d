"""Shared enums for the alerting subsystem — severities, channels, formats."""

from __future__ import annotations

from enum import StrEnum


class AlertSeverity(StrEnum):
    """Alert severity.

    String-valued so it serialises as ``"warning"`` etc., but ordered by an
    explicit rank table: ``info < warning < error < critical``.
    """

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, AlertSeverity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, AlertSeverity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, AlertSeverity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, AlertSeverity):
            return NotImplemented
        return self.rank >= other.rank


_SEVERITY_ORDER: tuple[AlertSeverity, ...] = (
    AlertSeverity.INFO,
    AlertSeverity.WARNING,
    AlertSeverity.ERROR,
    AlertSeverity.CRITICAL,
)


class AlertChannel(StrEnum):
    """Destination an alert can be routed to."""

    LOG = "log"
    WEBHOOK = "webhook"


class WebhookFormat(StrEnum):
    """Payload shape used by the webhook channel."""

    SLACK = "slack"
    DISCORD = "discord"
    GENERIC = "generic"
