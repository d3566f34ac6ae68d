"""Exception hierarchy for the alerting subsystem."""

from __future__ import annotations


class AlertError(Exception):
    """Base exception for all alerting errors."""


class AlertConfigError(AlertError):
    """Dispatcher configuration is malformed."""


class AlertDeliveryError(AlertError):
    """A channel failed to deliver an alert."""


class WebhookNotConfiguredError(AlertDeliveryError):
    """Webhook channel selected but no URL configured."""
