"""Real-time alerting for security and operational events."""

from vectorgov.alerts.channels import (
    LogChannel,
    LogHandler,
    NotificationChannel,
    WebhookChannel,
)
from vectorgov.alerts.dispatcher import AlertDispatcher
from vectorgov.alerts.exceptions import (
    AlertConfigError,
    AlertDeliveryError,
    AlertError,
    WebhookNotConfiguredError,
)
from vectorgov.alerts.factory import create_alert_dispatcher
from vectorgov.alerts.formatters import (
    format_log_line,
    format_payload,
    to_discord_payload,
    to_generic_payload,
    to_slack_payload,
)
from vectorgov.alerts.types import Alert, AlertResult

__all__ = [
    "Alert",
    "AlertConfigError",
    "AlertDeliveryError",
    "AlertDispatcher",
    "AlertError",
    "AlertResult",
    "LogChannel",
    "LogHandler",
    "NotificationChannel",
    "WebhookChannel",
    "WebhookNotConfiguredError",
    "create_alert_dispatcher",
    "format_log_line",
    "format_payload",
    "to_discord_payload",
    "to_generic_payload",
    "to_slack_payload",
]
