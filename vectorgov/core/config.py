"""Pydantic settings loaded from YAML configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    ValidationInfo,
    field_validator,
)
from pydantic.alias_generators import to_camel

from vectorgov.core.types import AlertChannel, AlertSeverity, WebhookFormat

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")


class DispatcherConfig(BaseModel):
    """Alert dispatcher configuration.

    Immutable once built. Accepts snake_case or camelCase keys. When the
    webhook is enabled and has a URL, ``webhook`` is added to ``channels``
    even if the caller left it out.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    min_severity: AlertSeverity = AlertSeverity.WARNING
    webhook_url: SecretStr = SecretStr("")
    webhook_enabled: bool = False
    webhook_format: WebhookFormat = WebhookFormat.SLACK
    cooldown_seconds: float = Field(default=60.0, ge=0)
    # Declared last so the validator can see the webhook fields.
    channels: tuple[AlertChannel, ...] = Field(
        default=(AlertChannel.LOG,),
        validate_default=True,
    )

    @field_validator("min_severity", "webhook_format", mode="before")
    @classmethod
    def _lowercase_enum_values(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("webhook_url", mode="before")
    @classmethod
    def _none_url_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("channels")
    @classmethod
    def _resolve_channels(
        cls,
        value: tuple[AlertChannel, ...],
        info: ValidationInfo,
    ) -> tuple[AlertChannel, ...]:
        resolved = list(dict.fromkeys(value))
        url: SecretStr | None = info.data.get("webhook_url")
        enabled = info.data.get("webhook_enabled", False)
        if (
            enabled
            and url is not None
            and url.get_secret_value()
            and AlertChannel.WEBHOOK not in resolved
        ):
            resolved.append(AlertChannel.WEBHOOK)
        return tuple(resolved)

    @property
    def has_webhook_url(self) -> bool:
        return bool(self.webhook_url.get_secret_value())


class LoggingConfig(BaseModel):
    """Logging configuration.

    ``quiet_loggers`` are third-party stdlib loggers held at WARNING so
    their connection chatter does not drown out alert events.
    """

    level: str = "INFO"
    format: str = "json"
    quiet_loggers: list[str] = Field(default_factory=lambda: ["aiohttp", "asyncio"])


class Settings(BaseModel):
    """Root settings container."""

    alerts: DispatcherConfig = DispatcherConfig()
    logging: LoggingConfig = LoggingConfig()


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file and cache globally.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.

    Returns:
        Parsed Settings instance.
    """
    global _settings  # noqa: PLW0603

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f)
            if isinstance(raw, dict):
                data = raw

    _settings = Settings(**data)
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None
