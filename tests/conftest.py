from __future__ import annotations

import json
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
import requests

from apod_store import PictureStore, build_config

NEW_YORK = ZoneInfo("America/New_York")


class FakeResponse:
    def __init__(self, *, status_code: int = 200, content: bytes = b"") -> None:
        self.status_code = status_code
        self.content = content

    def raise_for_status(self) -> None:
        if self.status_code < 400:
            return
        error = requests.HTTPError(f"{self.status_code} error")
        error.response = self  # type: ignore[assignment]
        raise error


class FakeSession:
    """Serves queued responses keyed by the ``date`` query parameter."""

    def __init__(self, responses: dict[str, FakeResponse | Exception] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[tuple[str, dict[str, str] | None, float]] = []
        self.closed = False

    def get(
        self,
        url: str,
        *,
        params: dict[str, str] | None = None,
        timeout: float,
    ) -> FakeResponse:
        self.calls.append((url, params, timeout))
        key = (params or {}).get("date", url)
        if key not in self.responses:
            raise RuntimeError(f"no response queued for {key}")
        response = self.responses[key]
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        self.closed = True

    @property
    def requested_dates(self) -> list[str]:
        return [params["date"] for _, params, _ in self.calls if params]


class FakeThumbnailer:
    def __init__(self, *, fail_on_load: Exception | None = None) -> None:
        self.fail_on_load = fail_on_load
        self.loaded: list[str] = []
        self.boxes: list[tuple[int, int]] = []

    def load_image(self, url: str) -> str:
        if self.fail_on_load is not None:
            raise self.fail_on_load
        self.loaded.append(url)
        return url

    def fit_to_box(self, image: str, width: int, height: int) -> str:
        self.boxes.append((width, height))
        return f"{image}@{width}x{height}"

    def save(self, image: str, path: Path) -> None:
        path.write_bytes(image.encode("utf-8"))


def picture_payload(day: str, *, media_type: str = "image") -> dict[str, object]:
    payload: dict[str, object] = {
        "date": day,
        "title": f"Picture for {day}",
        "explanation": "A view of the night sky.",
        "media_type": media_type,
        "service_version": "v1",
    }
    if media_type == "image":
        payload["url"] = f"https://apod.example.org/image/{day}.jpg"
        payload["hdurl"] = f"https://apod.example.org/image/{day}-hd.jpg"
    else:
        payload["url"] = f"https://www.youtube.com/embed/{day}"
    return payload


def ok_response(day: str, *, media_type: str = "image") -> FakeResponse:
    body = json.dumps(picture_payload(day, media_type=media_type)).encode("utf-8")
    return FakeResponse(content=body)


def fixed_clock(year: int, month: int, day: int, hour: int = 12) -> Callable[[], datetime]:
    moment = datetime(year, month, day, hour, tzinfo=NEW_YORK)
    return lambda: moment


@pytest.fixture
def store_dir(tmp_path: Path) -> Path:
    return tmp_path / "store"


@pytest.fixture
def make_store(store_dir: Path):
    def _make(
        *,
        session: FakeSession | None = None,
        thumbnailer: FakeThumbnailer | None = None,
        today: tuple[int, int, int] = (2024, 1, 3),
        start_date: str = "2024-01-01",
        **options: object,
    ) -> PictureStore:
        config = build_config(
            {
                "store_path": str(store_dir),
                "base_url": "https://cdn.example.com/apod/",
                "start_date": start_date,
                "api_key": "test-key",
                **options,
            }
        )
        return PictureStore(
            config,
            session=session or FakeSession(),  # type: ignore[arg-type]
            thumbnailer=thumbnailer or FakeThumbnailer(),
            clock=fixed_clock(*today),
        )

    return _make
