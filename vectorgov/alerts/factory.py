"""Convenience factory for wiring the alert dispatcher from settings."""

from __future__ import annotations

import aiohttp

from vectorgov.alerts.dispatcher import AlertDispatcher
from vectorgov.core.config import DispatcherConfig, get_settings


def create_alert_dispatcher(
    config: DispatcherConfig | None = None,
    *,
    session: aiohttp.ClientSession | None = None,
) -> AlertDispatcher:
    """Build a dispatcher from *config*, or from the ``alerts`` settings section."""
    cfg = config if config is not None else get_settings().alerts
    return AlertDispatcher(cfg, session=session)
