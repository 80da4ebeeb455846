from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import date
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigurationError

DEFAULT_TIMEZONE = "America/New_York"
DEFAULT_API_KEY = "DEMO_KEY"
DEFAULT_ENDPOINT = "https://api.nasa.gov/planetary/apod"
DEFAULT_START_DATE = date(1995, 6, 16)


class StoreConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    timezone: str = DEFAULT_TIMEZONE
    api_key: str = DEFAULT_API_KEY
    endpoint: str = DEFAULT_ENDPOINT
    start_date: date = DEFAULT_START_DATE
    thumbnail_width: int = Field(default=300, ge=1)
    thumbnail_height: int = Field(default=200, ge=1)
    timeout_seconds: float = Field(default=10.0, gt=0.0)
    store_path: str
    base_url: str

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("api_key", "endpoint")
    @classmethod
    def validate_not_blank(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("api_key and endpoint must not be empty")
        return normalized

    @field_validator("store_path", "base_url")
    @classmethod
    def normalize_trailing_slash(cls, value: str) -> str:
        normalized = value.strip().rstrip("/")
        if not value.strip():
            raise ValueError("store_path and base_url must be set")
        return f"{normalized}/"

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def build_config(options: Mapping[str, Any] | None = None, **overrides: Any) -> StoreConfig:
    """Merge options over the defaults and validate.

    Raises ConfigurationError when ``store_path`` or ``base_url`` is missing,
    or when any option fails validation.
    """
    payload = {**dict(options or {}), **overrides}
    payload = {key: value for key, value in payload.items() if value is not None}
    try:
        return StoreConfig.model_validate(payload)
    except ValidationError as exc:
        missing = [
            ".".join(str(part) for part in error["loc"])
            for error in exc.errors()
            if error["type"] == "missing"
        ]
        if missing:
            raise ConfigurationError(f"{', '.join(missing)} must be set") from exc
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc


def load_config(path: str | Path, **overrides: Any) -> StoreConfig:
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read configuration file: {path}") from exc
    payload = _parse_yaml_or_json(raw)
    return build_config(payload, **overrides)


def _parse_yaml_or_json(raw: str) -> dict[str, Any]:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        parsed = _parse_yaml(raw)
    if not isinstance(parsed, dict):
        raise ConfigurationError("Configuration root must be an object.")
    return parsed


def _parse_yaml(raw: str) -> dict[str, Any]:
    try:
        import yaml  # type: ignore[import-untyped]
    except ModuleNotFoundError as exc:
        raise ConfigurationError(
            "YAML parsing requires PyYAML. Use JSON-compatible YAML or install pyyaml."
        ) from exc

    try:
        parsed = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Configuration is neither JSON nor YAML: {exc}") from exc
    if not isinstance(parsed, dict):
        raise ConfigurationError("Configuration root must be an object.")
    return parsed
