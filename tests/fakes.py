"""Test doubles shared across the alerting tests."""

from __future__ import annotations

import asyncio

from vectorgov.alerts.channels import NotificationChannel
from vectorgov.alerts.types import Alert
from vectorgov.core.types import AlertChannel


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, secs: float) -> None:
        self.now += secs


class FakeChannel(NotificationChannel):
    """In-memory channel for testing."""

    def __init__(
        self,
        kind: AlertChannel = AlertChannel.LOG,
        *,
        fail: bool = False,
        result: bool = True,
        delay: float = 0.0,
    ) -> None:
        self.kind = kind
        self.sent: list[Alert] = []
        self._fail = fail
        self._result = result
        self._delay = delay
        self.closed = False

    async def send(self, alert: Alert) -> bool:
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._fail:
            raise ConnectionError("fake error")
        self.sent.append(alert)
        return self._result

    async def close(self) -> None:
        self.closed = True
