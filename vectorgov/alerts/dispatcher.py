"""Alert dispatcher — severity gate, per-type cooldown, multi-channel fan-out."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Mapping
from typing import Any, Callable

import aiohttp
import structlog
from pydantic import ValidationError

from vectorgov.alerts.channels import (
    LogChannel,
    LogHandler,
    NotificationChannel,
    WebhookChannel,
)
from vectorgov.alerts.exceptions import AlertConfigError, AlertDeliveryError
from vectorgov.alerts.types import Alert, AlertResult, alert_type_key
from vectorgov.core.config import DispatcherConfig
from vectorgov.core.types import AlertChannel, AlertSeverity

logger = structlog.get_logger(__name__)

_DEFAULT_SOURCE = "unknown"
_API_KEY_PREFIX_LEN = 10


def _coerce_config(config: DispatcherConfig | Mapping[str, Any] | None) -> DispatcherConfig:
    if config is None:
        return DispatcherConfig()
    if isinstance(config, DispatcherConfig):
        return config
    if isinstance(config, Mapping):
        try:
            return DispatcherConfig.model_validate(dict(config))
        except ValidationError as exc:
            raise AlertConfigError(f"Invalid dispatcher config: {exc}") from exc
    raise AlertConfigError(f"Unsupported config type: {type(config).__name__}")


def _resolve_severity(value: AlertSeverity | str | None) -> AlertSeverity:
    if value is None:
        return AlertSeverity.WARNING
    if isinstance(value, AlertSeverity):
        return value
    try:
        return AlertSeverity(str(value).strip().lower())
    except ValueError:
        logger.warning("unknown_severity_defaulted", severity=value)
        return AlertSeverity.WARNING


def _resolve_details(value: Any) -> dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, Mapping):
        return {str(k): v for k, v in value.items()}
    logger.warning("invalid_details_defaulted", details_type=type(value).__name__)
    return {}


class AlertDispatcher:
    """Turns events into alerts and fans them out to the configured channels.

    - Alerts below ``min_severity`` are dropped without touching any state.
    - Alerts sharing ``"<source>:<title>"`` are suppressed for
      ``cooldown_seconds`` after the last successful send, whatever their
      severity, unless ``bypass_cooldown`` is set.
    - Each channel is attempted independently; one failing channel never
      stops the others. ``AlertResult.error`` keeps the last failure only.
    - The cooldown is only refreshed when at least one channel delivered.

    Usage::

        dispatcher = AlertDispatcher({"webhook_url": url, "webhook_enabled": True})
        result = await dispatcher.send("PII Detectado", "CPF na query", source="pii_detector")
        await dispatcher.close()
    """

    def __init__(
        self,
        config: DispatcherConfig | Mapping[str, Any] | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = _coerce_config(config)
        self._clock = clock
        self._log_channel = LogChannel()
        self._webhook = WebhookChannel(
            self._config.webhook_url,
            self._config.webhook_format,
            session=session,
        )
        self._channels: dict[AlertChannel, NotificationChannel] = {
            AlertChannel.LOG: self._log_channel,
            AlertChannel.WEBHOOK: self._webhook,
        }
        # alert type -> clock value of the last successful send
        self._last_sent: dict[str, float] = {}
        self._type_locks: dict[str, asyncio.Lock] = {}

        if AlertChannel.WEBHOOK in self._config.channels and not self._config.has_webhook_url:
            logger.warning("webhook_channel_without_url")
        logger.debug(
            "alert_dispatcher_configured",
            channels=[c.value for c in self._config.channels],
            min_severity=self._config.min_severity.value,
            webhook_format=self._webhook.format.value,
        )

    @property
    def config(self) -> DispatcherConfig:
        return self._config

    @property
    def cooldowns(self) -> dict[str, float]:
        """Snapshot of the cooldown table."""
        return dict(self._last_sent)

    def set_log_handler(self, handler: LogHandler | None) -> None:
        """Route log-channel output to *handler* instead of structlog.

        Only one handler is kept; registering again replaces it and
        ``None`` restores the default.
        """
        self._log_channel.handler = handler

    def is_in_cooldown(self, source: str | None, title: str) -> bool:
        src = source if source is not None else _DEFAULT_SOURCE
        return self._in_cooldown(alert_type_key(src, title))

    # ── Core send ───────────────────────────────────────────────

    async def send(
        self,
        title: str,
        message: str,
        *,
        severity: AlertSeverity | str | None = None,
        source: str | None = None,
        details: Mapping[str, Any] | None = None,
        bypass_cooldown: bool = False,
    ) -> AlertResult:
        """Send an alert through every configured channel.

        Never raises for filtered alerts or channel failures; inspect the
        returned :class:`AlertResult` instead.
        """
        result = AlertResult()

        resolved = _resolve_severity(severity)
        if resolved < self._config.min_severity:
            return result

        src = source if source is not None else _DEFAULT_SOURCE
        alert_type = alert_type_key(src, title)

        # Held across the network call so concurrent sends of one type
        # cannot both pass the cooldown gate.
        async with self._lock_for(alert_type):
            if not bypass_cooldown and self._in_cooldown(alert_type):
                logger.info("alert_suppressed_cooldown", alert_type=alert_type)
                return result

            alert = Alert(
                title=title,
                message=message,
                severity=resolved,
                source=src,
                details=_resolve_details(details),
            )
            result.alert_id = alert.alert_id

            await self._dispatch_to_channels(alert, result)

            if result.sent:
                self._last_sent[alert_type] = self._clock()

        logger.debug(
            "alert_dispatched",
            alert_id=alert.alert_id,
            alert_type=alert_type,
            sent=result.sent,
            channels=[c.value for c in result.channels],
        )
        return result

    # ── Internal routing ────────────────────────────────────────

    def _lock_for(self, alert_type: str) -> asyncio.Lock:
        lock = self._type_locks.get(alert_type)
        if lock is None:
            lock = self._type_locks[alert_type] = asyncio.Lock()
        return lock

    def _in_cooldown(self, alert_type: str) -> bool:
        last = self._last_sent.get(alert_type)
        if last is None:
            return False
        return self._clock() - last < self._config.cooldown_seconds

    async def _dispatch_to_channels(self, alert: Alert, result: AlertResult) -> None:
        for kind in self._config.channels:
            channel = self._channels[kind]
            try:
                delivered = await channel.send(alert)
            except AlertDeliveryError as exc:
                logger.warning(
                    "channel_delivery_failed",
                    channel=kind.value,
                    alert_id=alert.alert_id,
                    error=str(exc),
                )
                result.error = str(exc)
                continue
            except Exception as exc:
                logger.exception(
                    "channel_dispatch_error",
                    channel=kind.value,
                    alert_id=alert.alert_id,
                )
                result.error = str(exc) or type(exc).__name__
                continue

            if delivered:
                result.channels.append(kind)
                result.sent = True
            else:
                result.error = f"{kind.value} channel did not deliver the alert"

    # ── Convenience wrappers ────────────────────────────────────

    async def alert_pii_detected(
        self,
        pii_types: list[str],
        action: str,
        details: Mapping[str, Any] | None = None,
    ) -> AlertResult:
        """Personal data (CPF, email, ...) found in a query or answer."""
        return await self.send(
            "PII Detectado",
            f"Dados pessoais ({', '.join(pii_types)}) detectados. Ação: {action}",
            severity=AlertSeverity.WARNING,
            source="pii_detector",
            details={"pii_types": pii_types, "action": action, **(details or {})},
        )

    async def alert_injection_detected(
        self,
        injection_type: str,
        risk_score: float,
        action: str,
        details: Mapping[str, Any] | None = None,
    ) -> AlertResult:
        """Prompt injection attempt; severity scales with *risk_score* (0.0-1.0)."""
        if risk_score >= 0.8:
            severity = AlertSeverity.CRITICAL
        elif risk_score >= 0.5:
            severity = AlertSeverity.ERROR
        else:
            severity = AlertSeverity.WARNING

        return await self.send(
            "Prompt Injection Detectado",
            f"Tentativa de injection tipo '{injection_type}' com score "
            f"{risk_score:.2f}. Ação: {action}",
            severity=severity,
            source="prompt_injection_detector",
            details={
                "injection_type": injection_type,
                "risk_score": risk_score,
                "action": action,
                **(details or {}),
            },
        )

    async def alert_circuit_breaker_open(
        self,
        service_name: str,
        failure_count: int,
        details: Mapping[str, Any] | None = None,
    ) -> AlertResult:
        return await self.send(
            "Circuit Breaker Aberto",
            f"Serviço '{service_name}' indisponível após {failure_count} falhas.",
            severity=AlertSeverity.ERROR,
            source="circuit_breaker",
            details={
                "service_name": service_name,
                "failure_count": failure_count,
                **(details or {}),
            },
        )

    async def alert_rate_limit_exceeded(
        self,
        api_key: str,
        limit: int,
        current: int,
        details: Mapping[str, Any] | None = None,
    ) -> AlertResult:
        """Rate limit breach. Only the first 10 characters of *api_key* are kept."""
        key_prefix = api_key[:_API_KEY_PREFIX_LEN]
        return await self.send(
            "Rate Limit Excedido",
            f"API key {key_prefix}... excedeu limite ({current}/{limit}).",
            severity=AlertSeverity.WARNING,
            source="rate_limiter",
            details={
                "api_key_prefix": key_prefix,
                "limit": limit,
                "current": current,
                **(details or {}),
            },
        )

    async def alert_security_incident(
        self,
        incident_type: str,
        description: str,
        details: Mapping[str, Any] | None = None,
    ) -> AlertResult:
        """Critical incident. Always bypasses the cooldown."""
        return await self.send(
            f"Incidente de Segurança: {incident_type}",
            description,
            severity=AlertSeverity.CRITICAL,
            source="security",
            details={"incident_type": incident_type, **(details or {})},
            bypass_cooldown=True,
        )

    async def alert_api_error(
        self,
        endpoint: str,
        error_message: str,
        status_code: int | None = None,
        details: Mapping[str, Any] | None = None,
    ) -> AlertResult:
        severity = (
            AlertSeverity.ERROR
            if status_code is not None and status_code >= 500
            else AlertSeverity.WARNING
        )
        merged: dict[str, Any] = {"endpoint": endpoint, "error_message": error_message}
        if status_code is not None:
            merged["status_code"] = status_code
        merged.update(details or {})

        return await self.send(
            "Erro na API",
            f"Endpoint {endpoint} retornou erro: {error_message}",
            severity=severity,
            source="api",
            details=merged,
        )

    # ── Lifecycle ───────────────────────────────────────────────

    async def close(self) -> None:
        for kind, ch in self._channels.items():
            try:
                await ch.close()
            except Exception:
                logger.exception("channel_close_error", channel=kind.value)

    async def __aenter__(self) -> AlertDispatcher:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
