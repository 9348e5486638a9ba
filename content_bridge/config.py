"""
Application settings loaded from environment variables.

Uses pydantic-settings to validate and type-cast env vars at startup.
The bridge config itself (sources, mappings, pagination) is a separate
JSON document read by ``load_bridge_config``.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from content_bridge.core.exceptions import ValidationException
from content_bridge.core.logging import get_logger
from content_bridge.schemas.source_schema import ContentBridgeConfig

logger = get_logger(__name__)


class Settings(BaseSettings):
    """Centralised application configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ───────────────────────────────────────────────────
    app_name: str = "content-bridge"
    app_env: Literal["development", "staging", "production"] = "development"
    app_debug: bool = False
    app_version: str = "1.0.0"

    # ── Server ────────────────────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 8000

    # ── Bridge config ─────────────────────────────────────────────────
    bridge_config_path: str = "site.json"
    bridge_config_key: str = "content-bridge"
    default_timeout_ms: int = 30_000

    # ── Logging ───────────────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"

    # ── CORS ──────────────────────────────────────────────────────────
    allowed_origins: str = "http://localhost:3000,http://localhost:8000"

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated origins into a list."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"


@lru_cache
def get_settings() -> Settings:
    """
    Cached singleton — settings are read once and reused.
    """
    return Settings()


def load_bridge_config(
    path: str | Path,
    key: str = "content-bridge",
) -> ContentBridgeConfig:
    """
    Read and validate the bridge config from a JSON file.

    A site file may hold several plugin configs under ``pluginConfigs``;
    in that case the entry named ``key`` is used. Otherwise the whole
    document is the bridge config.

    Raises:
        ValidationException: The file is missing, not JSON, or not a valid config.
    """
    config_path = Path(path)
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ValidationException(
            message=f"Bridge config not found: {config_path}",
            details={"path": str(config_path)},
        ) from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise ValidationException(
            message="Bridge config could not be read as JSON.",
            details={"path": str(config_path), "error": str(exc)},
        ) from exc

    if isinstance(raw, dict) and isinstance(raw.get("pluginConfigs"), dict):
        raw = raw["pluginConfigs"].get(key) or {}

    try:
        config = ContentBridgeConfig.model_validate(raw)
    except ValidationError as exc:
        raise ValidationException(
            message="Invalid bridge config.",
            details={
                "path": str(config_path),
                "errors": exc.errors(include_url=False, include_context=False),
            },
        ) from exc

    logger.info(
        "Bridge config loaded",
        extra={"path": str(config_path), "source_count": len(config.sources)},
    )
    return config
