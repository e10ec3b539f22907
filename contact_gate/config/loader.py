"""YAML + env var config loading with pydantic-settings."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import structlog
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

logger = structlog.get_logger()

_DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def parse_origins(raw: str) -> frozenset[str]:
    """Split a comma-separated origin list, trimming entries and dropping blanks."""
    return frozenset(part.strip() for part in raw.split(",") if part.strip())


class ContactSettings(BaseSettings):
    """Service configuration: YAML defaults, overridden by env vars."""

    model_config = SettingsConfigDict(
        env_prefix="CONTACT_",
        env_file=".env",
        env_file_encoding="utf-8",
        yaml_file=_DEFAULTS_PATH,
        extra="ignore",
    )

    listen_host: str = "0.0.0.0"
    listen_port: int = 3000
    # Comma-separated; exact-match origins only
    allowed_origins: str = "http://localhost:8080"
    environment: str = "development"
    log_level: str = "info"
    log_json: bool = True

    contact_path: str = "/api/contact"
    max_body_bytes: int = 64 * 1024

    # Rate limiting
    rate_limit_max: int = 5
    rate_limit_window_seconds: int = 900
    rate_limit_backend: Literal["memory", "redis"] = "memory"
    redis_url: str = "redis://localhost:6379"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    @property
    def allowed_origin_set(self) -> frozenset[str]:
        return parse_origins(self.allowed_origins)


_settings: ContactSettings | None = None


def get_settings() -> ContactSettings:
    """Get or create the singleton settings instance."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def load_settings() -> ContactSettings:
    """Load settings from YAML defaults and env vars (env vars win)."""
    global _settings
    _settings = ContactSettings()
    logger.info(
        "config_loaded",
        port=_settings.listen_port,
        environment=_settings.environment,
        allowed_origins=sorted(_settings.allowed_origin_set),
        rate_limit_backend=_settings.rate_limit_backend,
    )
    return _settings
