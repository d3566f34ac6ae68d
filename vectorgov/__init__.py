"""VectorGov SDK — alert dispatch for security and operational events."""

from vectorgov.alerts import (
    Alert,
    AlertConfigError,
    AlertDeliveryError,
    AlertDispatcher,
    AlertError,
    AlertResult,
    create_alert_dispatcher,
)
from vectorgov.core import (
    AlertChannel,
    AlertSeverity,
    DispatcherConfig,
    WebhookFormat,
    load_settings,
    setup_logging,
)

__all__ = [
    "Alert",
    "AlertChannel",
    "AlertConfigError",
    "AlertDeliveryError",
    "AlertDispatcher",
    "AlertError",
    "AlertResult",
    "AlertSeverity",
    "DispatcherConfig",
    "WebhookFormat",
    "create_alert_dispatcher",
    "load_settings",
    "setup_logging",
]
