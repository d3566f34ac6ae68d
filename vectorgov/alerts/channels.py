"""Notification channels — local log and HTTP webhook delivery."""

from __future__ import annotations

import abc
from typing import Callable

import aiohttp
import structlog
from pydantic import SecretStr

from vectorgov.alerts.exceptions import AlertDeliveryError, WebhookNotConfiguredError
from vectorgov.alerts.formatters import format_log_line, format_payload
from vectorgov.alerts.types import Alert
from vectorgov.core.types import AlertChannel, AlertSeverity, WebhookFormat

logger = structlog.get_logger(__name__)

LogHandler = Callable[[str, AlertSeverity], None]

_JSON_HEADERS = {"Content-Type": "application/json"}


class NotificationChannel(abc.ABC):
    """Base class for alert delivery channels.

    ``send`` returns True on delivery. Failures are reported by raising
    :class:`AlertDeliveryError` (a False return is also treated as failure).
    """

    kind: AlertChannel

    @abc.abstractmethod
    async def send(self, alert: Alert) -> bool:
        """Deliver an alert. Returns True on success."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Release resources (HTTP sessions, etc.)."""


class LogChannel(NotificationChannel):
    """Emits alerts as single log lines.

    With no handler registered the line goes to structlog at a level
    matching the severity; otherwise the handler receives it instead.
    """

    kind = AlertChannel.LOG

    def __init__(self, handler: LogHandler | None = None) -> None:
        self.handler = handler

    async def send(self, alert: Alert) -> bool:
        line = format_log_line(alert)

        if self.handler is not None:
            self.handler(line, alert.severity)
        elif alert.severity == AlertSeverity.INFO:
            logger.info(line, alert_id=alert.alert_id)
        elif alert.severity == AlertSeverity.WARNING:
            logger.warning(line, alert_id=alert.alert_id)
        else:
            logger.error(line, alert_id=alert.alert_id)

        return True

    async def close(self) -> None:
        pass


class WebhookChannel(NotificationChannel):
    """POSTs a Slack, Discord or generic JSON payload to a webhook URL.

    One attempt per alert, no retry. Any 2xx response counts as delivered.
    A session passed in by the caller is used as-is and left open on close.
    """

    kind = AlertChannel.WEBHOOK

    def __init__(
        self,
        url: SecretStr | str,
        fmt: WebhookFormat = WebhookFormat.SLACK,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._url = url.get_secret_value() if isinstance(url, SecretStr) else url
        self._format = fmt
        self._session = session
        self._owns_session = session is None

    @property
    def format(self) -> WebhookFormat:
        return self._format

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def send(self, alert: Alert) -> bool:
        if not self._url:
            raise WebhookNotConfiguredError("Webhook URL not configured")

        payload = format_payload(alert, self._format)
        log = logger.bind(alert_id=alert.alert_id, webhook_format=self._format.value)

        try:
            session = self._get_session()
            async with session.post(self._url, json=payload, headers=_JSON_HEADERS) as resp:
                if 200 <= resp.status < 300:
                    log.debug("webhook_delivered", status=resp.status)
                    return True
                body = await resp.text()
                log.warning(
                    "webhook_send_failed",
                    status=resp.status,
                    body=body[:200],
                )
                raise AlertDeliveryError(f"Webhook returned {resp.status}: {resp.reason}")
        # OSError covers timeouts and refused connections.
        except (aiohttp.ClientError, OSError) as exc:
            log.warning("webhook_send_error", error=str(exc))
            raise AlertDeliveryError(f"Webhook request failed: {exc}") from exc

    async def close(self) -> None:
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None
