"""Domain types for the alerting subsystem."""

from __future__ import annotations

import secrets
import string
import time
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from vectorgov.core.types import AlertChannel, AlertSeverity

_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_SUFFIX_LEN = 7


def generate_alert_id() -> str:
    """Time-based id with a short random suffix (best-effort unique)."""
    millis = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_SUFFIX_LEN))
    return f"alert-{millis}-{suffix}"


def alert_type_key(source: str, title: str) -> str:
    """Cooldown key shared by alerts with the same source and title."""
    return f"{source}:{title}"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Alert(BaseModel):
    """A single alert, built once per accepted ``send`` and never mutated."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    alert_id: str = Field(default_factory=generate_alert_id)
    title: str
    message: str
    severity: AlertSeverity = AlertSeverity.WARNING
    source: str = "unknown"
    details: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=_utcnow)

    @property
    def alert_type(self) -> str:
        """Cooldown key — ``"<source>:<title>"``."""
        return alert_type_key(self.source, self.title)

    @property
    def utc_timestamp(self) -> datetime:
        ts = self.timestamp
        if ts.tzinfo is None:
            return ts.replace(tzinfo=UTC)
        return ts.astimezone(UTC)

    @property
    def iso_timestamp(self) -> str:
        """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
        return self.utc_timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    @property
    def unix_ts(self) -> int:
        return int(self.utc_timestamp.timestamp())

    @field_serializer("timestamp")
    def _serialize_timestamp(self, value: datetime) -> str:
        return self.iso_timestamp


class AlertResult(BaseModel):
    """Outcome of a ``send`` call.

    ``alert_id`` is set only when the alert passed the severity and cooldown
    gates. ``error`` holds the last channel failure, if any.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    sent: bool = False
    alert_id: str | None = None
    channels: list[AlertChannel] = Field(default_factory=list)
    error: str | None = None
