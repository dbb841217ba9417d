"""permission-translation configuration: Pydantic model and TOML loading."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel, Field, field_validator, model_validator

from permission_translation.checks import inspect_descriptor
from permission_translation.core.constants import (
    CONFIG_FILENAME,
    CURRENT_CONFIG_VERSION,
    ENV_CONFIG_PATH,
    ENV_LOG_FORMAT,
    ENV_LOG_LEVEL,
)
from permission_translation.core.exceptions import ConfigError, ConfigNotFoundError
from permission_translation.descriptor import CapabilityDescriptor, format_hex, parse_hex

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# Sub-models
# ---------------------------------------------------------------------------


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "text"  # "text" | "json"

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v.lower() not in ("text", "json"):
            raise ValueError(f"Log format must be 'text' or 'json', got {v!r}")
        return v.lower()

    @property
    def json_output(self) -> bool:
        return self.format == "json"


class ValidationConfig(BaseModel):
    model_config = {"extra": "forbid"}

    reject_corrupted_descriptor: bool = True


# ---------------------------------------------------------------------------
# Root config
# ---------------------------------------------------------------------------


class PermissionTranslationConfig(BaseModel):
    """Root configuration model: a descriptor plus logging and validation settings."""

    config_version: int = CURRENT_CONFIG_VERSION
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    capabilities: dict[str, int] = Field(default_factory=dict)

    @field_validator("config_version")
    @classmethod
    def validate_version(cls, v: int) -> int:
        if v != CURRENT_CONFIG_VERSION:
            raise ValueError(
                f"Unsupported config_version {v}. Expected {CURRENT_CONFIG_VERSION}."
            )
        return v

    @field_validator("capabilities", mode="before")
    @classmethod
    def parse_capability_values(cls, v: Any) -> Any:
        """Accept TOML integers as well as integer text such as ``"0x1F"``."""
        if not isinstance(v, dict):
            return v
        parsed: dict[str, int] = {}
        for name, raw in v.items():
            try:
                parsed[str(name)] = parse_hex(raw)
            except TypeError as exc:
                raise ValueError(f"Capability {name!r}: {exc}") from exc
        return parsed

    @model_validator(mode="after")
    def reject_corrupted(self) -> PermissionTranslationConfig:
        if not self.validation.reject_corrupted_descriptor:
            return self
        report = inspect_descriptor(self.build_descriptor())
        if not report.well_formed:
            details = "; ".join(
                f"{a} and {b} share {format_hex(bits)}" for a, b, bits in report.overlaps
            )
            if report.out_of_range_entries:
                out_of_range = ", ".join(report.out_of_range_entries)
                details = "; ".join(filter(None, [details, f"out of range: {out_of_range}"]))
            raise ValueError(
                f"Corrupted capability descriptor ({details or 'sum exceeds width'}). "
                "Set [validation] reject_corrupted_descriptor = false to load it anyway."
            )
        return self

    def build_descriptor(self) -> CapabilityDescriptor:
        return CapabilityDescriptor(self.capabilities)


# ---------------------------------------------------------------------------
# Load
# ---------------------------------------------------------------------------


def _config_file_path() -> Path:
    if env_path := os.environ.get(ENV_CONFIG_PATH):
        return Path(env_path)
    return Path.cwd() / CONFIG_FILENAME


def load_config(path: Path | str | None = None) -> PermissionTranslationConfig:
    """
    Load PermissionTranslationConfig from a TOML file, overlaid with environment variables.

    Path resolution (first match wins):
      1. *path* argument
      2. ``PERMISSION_TRANSLATION_CONFIG`` environment variable
      3. ``./permissions.toml``
    """
    cfg_path = Path(path) if path is not None else _config_file_path()

    if not cfg_path.exists():
        raise ConfigNotFoundError(f"Config file not found: {cfg_path}")

    try:
        with open(cfg_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Cannot read config file {cfg_path}: {exc}") from exc

    _apply_env_overrides(data, cfg_path)

    try:
        config = PermissionTranslationConfig.model_validate(data)
    except (ValueError, TypeError) as exc:
        raise ConfigError(f"Invalid config at {cfg_path}: {exc}") from exc

    logger.debug(
        "config_loaded",
        path=str(cfg_path),
        capabilities=len(config.capabilities),
    )
    return config


def _apply_env_overrides(data: dict[str, Any], cfg_path: Path) -> None:
    """Overlay PERMISSION_TRANSLATION_* environment variables onto parsed TOML."""
    overrides = {
        key: value
        for key, env_name in (("level", ENV_LOG_LEVEL), ("format", ENV_LOG_FORMAT))
        if (value := os.environ.get(env_name, ""))
    }
    if not overrides:
        return
    section = data.setdefault("logging", {})
    if not isinstance(section, dict):
        raise ConfigError(f"Invalid config at {cfg_path}: [logging] must be a table")
    section.update(overrides)
