from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest
from pydantic import ValidationError

from apod_store import ConfigurationError, StoreConfig, build_config, load_config

ROOT = Path(__file__).resolve().parents[1]


def test_defaults_are_applied_before_required_fields() -> None:
    config = build_config({"store_path": "/var/apod", "base_url": "https://example.com/apod"})

    assert config.timezone == "America/New_York"
    assert config.api_key == "DEMO_KEY"
    assert config.endpoint == "https://api.nasa.gov/planetary/apod"
    assert config.start_date == date(1995, 6, 16)
    assert (config.thumbnail_width, config.thumbnail_height) == (300, 200)


def test_paths_are_normalized_to_single_trailing_slash() -> None:
    config = build_config(store_path="/var/apod///", base_url="https://example.com/apod")

    assert config.store_path == "/var/apod/"
    assert config.base_url == "https://example.com/apod/"


@pytest.mark.parametrize("missing", ["store_path", "base_url"])
def test_missing_required_option_is_configuration_error(missing: str) -> None:
    options = {"store_path": "/var/apod", "base_url": "https://example.com/apod"}
    options.pop(missing)

    with pytest.raises(ConfigurationError, match=f"{missing} must be set"):
        build_config(options)


def test_none_required_option_counts_as_missing() -> None:
    with pytest.raises(ConfigurationError, match="store_path must be set"):
        build_config(store_path=None, base_url="https://example.com")


def test_invalid_values_are_rejected() -> None:
    base = {"store_path": "/var/apod", "base_url": "https://example.com"}

    with pytest.raises(ConfigurationError):
        build_config(base, timezone="Mars/Olympus_Mons")
    with pytest.raises(ConfigurationError):
        build_config(base, thumbnail_width=0)
    with pytest.raises(ConfigurationError):
        build_config(base, unknown_option=True)


def test_config_is_immutable() -> None:
    config = build_config(store_path="/var/apod", base_url="https://example.com")

    with pytest.raises(ValidationError):
        config.api_key = "other"  # type: ignore[misc]


def test_load_config_from_json_with_overrides(tmp_path) -> None:
    path = tmp_path / "apod.json"
    path.write_text(
        json.dumps(
            {
                "store_path": str(tmp_path / "store"),
                "base_url": "https://example.com/apod/",
                "start_date": "2020-02-29",
            }
        ),
        encoding="utf-8",
    )

    config = load_config(path, api_key="from-env")

    assert config.start_date == date(2020, 2, 29)
    assert config.api_key == "from-env"


def test_example_config_loads() -> None:
    config = load_config(ROOT / "config" / "apod.example.yaml")

    assert isinstance(config, StoreConfig)
    assert config.store_path == "data/apod/"
    assert config.start_date == date(1995, 6, 16)


def test_load_config_rejects_non_object_root(tmp_path) -> None:
    path = tmp_path / "apod.json"
    path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_config(path)
