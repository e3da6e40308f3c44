from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from cassius_notify import CONFIG_PATH
from cassius_notify.models import DEFAULT_DIGEST_TIME, Category, parse_digest_time

logger = logging.getLogger(__name__)


# =============================================================================
# Catalog (notifications.yaml -> catalog)
# =============================================================================

class NotificationTypeConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    type: str = Field(min_length=1)
    category: Category
    label: str = Field(default="")
    description: str = Field(default="")


class CatalogConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    version: str = Field(default="1")
    # Empty list means the built-in clinic catalog
    types: list[NotificationTypeConfig] = Field(default_factory=list)


# =============================================================================
# Digest schedule (notifications.yaml -> digest)
# =============================================================================

class DigestScheduleConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    daily_hour: int = Field(default=19, ge=0, le=23)
    weekly_weekday: int = Field(default=4, ge=0, le=6)  # Monday = 0, Friday = 4
    weekly_hour: int = Field(default=19, ge=0, le=23)
    default_digest_time: str = Field(default=DEFAULT_DIGEST_TIME)
    timezone: str = Field(default="Europe/Paris")

    @field_validator("default_digest_time")
    @classmethod
    def _valid_time(cls, value: str) -> str:
        return parse_digest_time(value).strftime("%H:%M")

    @field_validator("timezone")
    @classmethod
    def _valid_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {value}") from None
        return value


# =============================================================================
# Logging (notifications.yaml -> logging)
# =============================================================================

class LoggingConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    level: str = Field(default="INFO")
    format: Literal["console", "json"] = Field(default="console")

    @field_validator("level")
    @classmethod
    def _valid_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return level


class NotifyConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    digest: DigestScheduleConfig = Field(default_factory=DigestScheduleConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(path: Optional[Path] = None) -> NotifyConfig:
    yaml_path = path or CONFIG_PATH

    try:
        if yaml_path.exists():
            with open(yaml_path) as f:
                raw = yaml.safe_load(f) or {}
        else:
            raw = {}

        return NotifyConfig.model_validate(raw)
    except (OSError, yaml.YAMLError, ValueError) as e:
        logger.warning(f"Config validation failed for {yaml_path}: {e}, using defaults")
        return NotifyConfig()


__all__ = [
    "CatalogConfig",
    "DigestScheduleConfig",
    "LoggingConfig",
    "NotificationTypeConfig",
    "NotifyConfig",
    "load_config",
]
