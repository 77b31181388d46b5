"""Configuration for the Unpoly integration.

Precedence (highest first):
- Environment variables (``UP_*``).
- Optional text files under ``config/`` (one value per file).
- Defaults.

Validation is done by pydantic; invalid values are logged and re-raised.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
logger = logging.getLogger(__name__)

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        # Recoverable: an unreadable override falls back to the next source
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


def _setting(env_key: str, file_name: str, default: str) -> str:
    value = _env(env_key)
    if value is None:
        value = _read_config_file(file_name)
    return default if value is None else value


class UnpolyConfig(BaseModel):
    # Raise on malformed X-Up-Context JSON instead of degrading to null
    strict_context_json: bool = False
    # Write rendered X-Up-* headers from the ASGI middleware
    auto_emit_headers: bool = True
    # Let browsers read the X-Up-* response headers across origins
    expose_headers: bool = True
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    log_level: Optional[str] = None

    @field_validator("strict_context_json", "auto_emit_headers", "expose_headers", mode="before")
    @classmethod
    def parse_flag(cls, v: object) -> object:
        if isinstance(v, str):
            text = v.strip().lower()
            if text in _TRUE:
                return True
            if text in _FALSE:
                return False
            raise ValueError(f"expected a boolean flag, got {v!r}")
        return v

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, v: object) -> object:
        if isinstance(v, str):
            return [o.strip() for o in v.split(",") if o.strip()]
        return v

    @field_validator("log_level")
    @classmethod
    def level_must_be_known(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.strip().upper() not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}")
        return v.strip().upper()


def load_config() -> UnpolyConfig:
    """Load and validate configuration from the environment and ``config/``."""
    try:
        return UnpolyConfig(
            strict_context_json=_setting("UP_STRICT_CONTEXT_JSON", "up.strict_context_json", "false"),
            auto_emit_headers=_setting("UP_AUTO_EMIT_HEADERS", "up.auto_emit_headers", "true"),
            expose_headers=_setting("UP_EXPOSE_HEADERS", "up.expose_headers", "true"),
            cors_origins=_setting("UP_CORS_ORIGINS", "up.cors_origins", "*"),
            log_level=_env("UP_LOG_LEVEL") or _read_config_file("up.log_level"),
        )
    except PydanticValidationError as e:
        logger.error("Invalid Unpoly configuration: %s", e)
        raise


__all__ = ["UnpolyConfig", "load_config"]
