"""Pure functions that turn an Alert into webhook payloads and log lines."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

from pydantic_core import to_jsonable_python

from vectorgov.alerts.types import Alert
from vectorgov.core.types import AlertSeverity, WebhookFormat

FOOTER = "VectorGov Security"
FIELD_VALUE_MAX_LEN = 100

# ── Severity styling ────────────────────────────────────────────

_SLACK_COLORS: dict[AlertSeverity, str] = {
    AlertSeverity.INFO: "#36a64f",      # green
    AlertSeverity.WARNING: "#ff9800",   # orange
    AlertSeverity.ERROR: "#f44336",     # red
    AlertSeverity.CRITICAL: "#9c27b0",  # purple
}

# Discord embeds take decimal colours.
_DISCORD_COLORS: dict[AlertSeverity, int] = {
    AlertSeverity.INFO: 3581519,       # 0x36A64F
    AlertSeverity.WARNING: 16750592,   # 0xFF9800
    AlertSeverity.ERROR: 16007990,     # 0xF44336
    AlertSeverity.CRITICAL: 10233520,  # 0x9C26B0
}

_SLACK_EMOJIS: dict[AlertSeverity, str] = {
    AlertSeverity.INFO: ":information_source:",
    AlertSeverity.WARNING: ":warning:",
    AlertSeverity.ERROR: ":x:",
    AlertSeverity.CRITICAL: ":rotating_light:",
}

_WORD_START = re.compile(r"\b\w")


# ── Helpers ─────────────────────────────────────────────────────


def humanize_key(key: str) -> str:
    """``"pii_types"`` -> ``"Pii Types"``.

    Only the first letter of each word is touched; the rest keeps its case.
    """
    return _WORD_START.sub(lambda m: m.group(0).upper(), key.replace("_", " "))


def stringify(value: Any) -> str:
    """Render a detail value as display text."""
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple, set, frozenset)):
        return ", ".join(stringify(v) for v in value)
    if value is None or isinstance(value, (bool, Mapping)):
        return json.dumps(value, default=str, ensure_ascii=False)
    return str(value)


def _detail_fields(details: Mapping[str, Any]) -> list[tuple[str, str]]:
    return [
        (humanize_key(key), stringify(value)[:FIELD_VALUE_MAX_LEN])
        for key, value in details.items()
    ]


# ── Payloads ────────────────────────────────────────────────────


def to_slack_payload(alert: Alert) -> dict[str, Any]:
    """Slack incoming-webhook payload with a single coloured attachment."""
    fields: list[dict[str, Any]] = [
        {"title": "Severidade", "value": alert.severity.value.upper(), "short": True},
        {"title": "Fonte", "value": alert.source, "short": True},
    ]
    fields.extend(
        {"title": title, "value": value, "short": True}
        for title, value in _detail_fields(alert.details)
    )

    return {
        "attachments": [
            {
                "color": _SLACK_COLORS[alert.severity],
                "title": f"{_SLACK_EMOJIS[alert.severity]} {alert.title}",
                "text": alert.message,
                "fields": fields,
                "footer": FOOTER,
                "ts": alert.unix_ts,
            }
        ]
    }


def to_discord_payload(alert: Alert) -> dict[str, Any]:
    """Discord webhook payload with a single embed."""
    fields: list[dict[str, Any]] = [
        {"name": "Severidade", "value": alert.severity.value.upper(), "inline": True},
        {"name": "Fonte", "value": alert.source, "inline": True},
    ]
    fields.extend(
        {"name": name, "value": value, "inline": True}
        for name, value in _detail_fields(alert.details)
    )

    return {
        "embeds": [
            {
                "title": alert.title,
                "description": alert.message,
                "color": _DISCORD_COLORS[alert.severity],
                "fields": fields,
                "footer": {"text": FOOTER},
                "timestamp": alert.iso_timestamp,
            }
        ]
    }


def to_generic_payload(alert: Alert) -> dict[str, Any]:
    """The alert itself, with camelCase keys.

    Detail values JSON cannot represent are rendered with ``str()``.
    """
    payload = alert.model_dump(mode="json", by_alias=True, exclude={"details"})
    payload["details"] = to_jsonable_python(alert.details, fallback=str)
    return payload


_FORMATTERS = {
    WebhookFormat.SLACK: to_slack_payload,
    WebhookFormat.DISCORD: to_discord_payload,
    WebhookFormat.GENERIC: to_generic_payload,
}


def format_payload(alert: Alert, fmt: WebhookFormat) -> dict[str, Any]:
    """Build the webhook body for *alert* in the requested format."""
    return _FORMATTERS[fmt](alert)


def format_log_line(alert: Alert) -> str:
    """Single-line text form used by the log channel."""
    details = json.dumps(alert.details, default=str, ensure_ascii=False)
    return (
        f"[ALERT] {alert.title} | {alert.message} | "
        f"severity={alert.severity.value} | source={alert.source} | "
        f"details={details}"
    )
