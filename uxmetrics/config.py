from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENV_PREFIX = "UXMETRICS_"


class FormattingConfig(BaseModel):
    percentage_decimals: int = Field(default=1, ge=0, le=10)
    rounding_decimals: int = Field(default=2, ge=0, le=10)


class AggregationConfig(BaseModel):
    """Defaults applied when the caller does not say how to match tasks.

    ``exact`` compares the stable task key; ``substring`` reproduces the
    case-insensitive description search of the dashboard UI.
    """

    task_match: Literal["exact", "substring"] = "exact"


class LoggingConfig(BaseModel):
    level: str = "INFO"
    json_output: bool = False

    @field_validator("level")
    @classmethod
    def _validate_level(cls, value: str) -> str:
        normalized = value.upper()
        if normalized not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level: {value}")
        return normalized


class UXMetricsSettings(BaseSettings):
    formatting: FormattingConfig = Field(default_factory=FormattingConfig)
    aggregation: AggregationConfig = Field(default_factory=AggregationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix=_ENV_PREFIX,
        env_nested_delimiter="__",
        extra="ignore",
    )


def _coerce_env_value(value: str) -> object:
    parsed = yaml.safe_load(value)
    return value if parsed is None else parsed


def _set_nested(mapping: dict[str, object], path: list[str], value: object) -> None:
    current = mapping
    for key in path[:-1]:
        existing = current.get(key)
        if not isinstance(existing, dict):
            existing = {}
            current[key] = existing
        current = existing
    current[path[-1]] = value


def _apply_env_overrides(data: dict[str, object]) -> dict[str, object]:
    merged = dict(data)
    for key, raw_value in os.environ.items():
        if not key.startswith(_ENV_PREFIX):
            continue
        path = key[len(_ENV_PREFIX) :].lower().split("__")
        _set_nested(merged, path, _coerce_env_value(raw_value))
    return merged


def load_config(path: str | Path = "config/uxmetrics.yaml") -> UXMetricsSettings:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"config file not found: {config_path}")

    loaded = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    if not isinstance(loaded, dict):
        raise ValueError("config file must contain a top-level mapping")

    raw = loaded.get("uxmetrics", loaded)
    if not isinstance(raw, dict):
        raise ValueError("uxmetrics config section must be a mapping")

    return UXMetricsSettings.model_validate(_apply_env_overrides(raw))


__all__ = [
    "AggregationConfig",
    "FormattingConfig",
    "LoggingConfig",
    "UXMetricsSettings",
    "load_config",
]
