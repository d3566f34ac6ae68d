"""Core module — config, shared enums, logging."""

from vectorgov.core.config import (
    DispatcherConfig,
    LoggingConfig,
    Settings,
    get_settings,
    load_settings,
    reset_settings,
)
from vectorgov.core.logging import setup_logging
from vectorgov.core.types import AlertChannel, AlertSeverity, WebhookFormat

__all__ = [
    "AlertChannel",
    "AlertSeverity",
    "DispatcherConfig",
    "LoggingConfig",
    "Settings",
    "WebhookFormat",
    "get_settings",
    "load_settings",
    "reset_settings",
    "setup_logging",
]
