"""Tests for notification channels — log routing, webhook HTTP mocking, error handling."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest
from pydantic import SecretStr

from vectorgov.alerts.channels import LogChannel, WebhookChannel
from vectorgov.alerts.exceptions import AlertDeliveryError, WebhookNotConfiguredError
from vectorgov.alerts.types import Alert
from vectorgov.core.types import AlertChannel, AlertSeverity, WebhookFormat

_URL = "https://hooks.slack.com/services/fake"


# ── Helpers ─────────────────────────────────────────────────────


def _alert(**kw: object) -> Alert:
    defaults: dict[str, object] = {
        "title": "TEST_TITLE",
        "message": "test body",
        "severity": AlertSeverity.WARNING,
        "source": "tests",
        "details": {"key": "value"},
    }
    defaults.update(kw)
    return Alert(**defaults)  # type: ignore[arg-type]


def _mock_response(status: int = 200, text: str = "ok", reason: str = "OK") -> AsyncMock:
    resp = AsyncMock()
    resp.status = status
    resp.reason = reason
    resp.text = AsyncMock(return_value=text)
    resp.__aenter__ = AsyncMock(return_value=resp)
    resp.__aexit__ = AsyncMock(return_value=False)
    return resp


def _mock_session(resp: AsyncMock | None = None, error: Exception | None = None) -> MagicMock:
    session = MagicMock()
    if error is not None:
        session.post = MagicMock(side_effect=error)
    else:
        session.post = MagicMock(return_value=resp or _mock_response())
    session.closed = False
    return session


# ── LogChannel ──────────────────────────────────────────────────


class TestLogChannel:
    async def test_always_succeeds(self) -> None:
        ch = LogChannel()
        assert ch.kind == AlertChannel.LOG
        assert await ch.send(_alert()) is True

    async def test_level_by_severity(self) -> None:
        ch = LogChannel()
        expected = {
            AlertSeverity.INFO: "info",
            AlertSeverity.WARNING: "warning",
            AlertSeverity.ERROR: "error",
            AlertSeverity.CRITICAL: "error",
        }
        for severity, method in expected.items():
            with patch("vectorgov.alerts.channels.logger") as mock_log:
                await ch.send(_alert(severity=severity))
                getattr(mock_log, method).assert_called_once()
                line = getattr(mock_log, method).call_args[0][0]
                assert line.startswith("[ALERT] TEST_TITLE | test body")
                assert f"severity={severity.value}" in line

    async def test_custom_handler_bypasses_logger(self) -> None:
        received: list[tuple[str, AlertSeverity]] = []
        ch = LogChannel(handler=lambda msg, sev: received.append((msg, sev)))
        with patch("vectorgov.alerts.channels.logger") as mock_log:
            assert await ch.send(_alert(severity=AlertSeverity.CRITICAL)) is True
            mock_log.error.assert_not_called()
            mock_log.info.assert_not_called()
            mock_log.warning.assert_not_called()
        assert len(received) == 1
        msg, sev = received[0]
        assert sev == AlertSeverity.CRITICAL
        assert 'details={"key": "value"}' in msg

    async def test_close_noop(self) -> None:
        await LogChannel().close()


# ── WebhookChannel ──────────────────────────────────────────────


class TestWebhookChannel:
    async def test_send_success(self) -> None:
        session = _mock_session(_mock_response(200))
        ch = WebhookChannel(_URL, WebhookFormat.SLACK, session=session)

        assert await ch.send(_alert()) is True
        session.post.assert_called_once()
        call_args = session.post.call_args
        assert call_args[0][0] == _URL
        assert call_args[1]["headers"]["Content-Type"] == "application/json"
        assert "attachments" in call_args[1]["json"]

    async def test_any_2xx_is_success(self) -> None:
        for status in (200, 201, 204):
            session = _mock_session(_mock_response(status))
            ch = WebhookChannel(_URL, session=session)
            assert await ch.send(_alert()) is True

    async def test_secret_url_unwrapped(self) -> None:
        session = _mock_session()
        ch = WebhookChannel(SecretStr(_URL), session=session)
        await ch.send(_alert())
        assert session.post.call_args[0][0] == _URL

    async def test_discord_format(self) -> None:
        session = _mock_session(_mock_response(204))
        ch = WebhookChannel(_URL, WebhookFormat.DISCORD, session=session)
        await ch.send(_alert())
        payload = session.post.call_args[1]["json"]
        assert payload["embeds"][0]["title"] == "TEST_TITLE"

    async def test_generic_format(self) -> None:
        session = _mock_session()
        ch = WebhookChannel(_URL, WebhookFormat.GENERIC, session=session)
        alert = _alert()
        await ch.send(alert)
        payload = session.post.call_args[1]["json"]
        assert payload["alertId"] == alert.alert_id
        assert payload["source"] == "tests"

    async def test_non_2xx_raises(self) -> None:
        session = _mock_session(_mock_response(500, "boom", "Internal Server Error"))
        ch = WebhookChannel(_URL, session=session)
        with pytest.raises(AlertDeliveryError, match="Webhook returned 500: Internal Server Error"):
            await ch.send(_alert())

    async def test_redirect_status_is_failure(self) -> None:
        session = _mock_session(_mock_response(302, "", "Found"))
        ch = WebhookChannel(_URL, session=session)
        with pytest.raises(AlertDeliveryError):
            await ch.send(_alert())

    async def test_transport_error_raises(self) -> None:
        session = _mock_session(error=aiohttp.ClientConnectionError("refused"))
        ch = WebhookChannel(_URL, session=session)
        with pytest.raises(AlertDeliveryError, match="refused"):
            await ch.send(_alert())

    async def test_timeout_raises(self) -> None:
        session = _mock_session(error=TimeoutError())
        ch = WebhookChannel(_URL, session=session)
        with pytest.raises(AlertDeliveryError):
            await ch.send(_alert())

    async def test_empty_url_never_hits_network(self) -> None:
        session = _mock_session()
        ch = WebhookChannel("", session=session)
        with pytest.raises(WebhookNotConfiguredError):
            await ch.send(_alert())
        session.post.assert_not_called()

    async def test_single_attempt(self) -> None:
        session = _mock_session(_mock_response(503))
        ch = WebhookChannel(_URL, session=session)
        with pytest.raises(AlertDeliveryError):
            await ch.send(_alert())
        assert session.post.call_count == 1


class TestWebhookSession:
    async def test_injected_session_not_closed(self) -> None:
        session = AsyncMock()
        session.closed = False
        ch = WebhookChannel(_URL, session=session)
        await ch.close()
        session.close.assert_not_awaited()

    async def test_owned_session_closed(self) -> None:
        ch = WebhookChannel(_URL)
        session = AsyncMock()
        session.closed = False
        ch._session = session
        await ch.close()
        session.close.assert_awaited_once()

    async def test_close_when_no_session(self) -> None:
        ch = WebhookChannel(_URL)
        await ch.close()  # should not raise

    async def test_lazy_session_creation(self) -> None:
        ch = WebhookChannel(_URL)
        assert ch._session is None
        session = ch._get_session()
        assert session is not None
        await ch.close()
