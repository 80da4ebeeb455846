from __future__ import annotations

import json
import logging
from pathlib import Path

from apod_store.schemas import Picture

logger = logging.getLogger(__name__)

JSON_SUFFIX = ".json"
THUMBNAIL_SUFFIX = ".thumb.jpg"
_MANAGED_PATTERNS = ("*.json", "*.jpg")


class FlatFileStore:
    """Date-keyed picture records kept as ``<date>.json`` plus ``<date>.thumb.jpg``.

    A date is stored iff its JSON file exists. The thumbnail is optional and
    only controls whether ``thumbnail_url`` is attached on read.
    """

    def __init__(self, directory: str | Path, base_url: str) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self.base_url = base_url if base_url.endswith("/") else f"{base_url}/"

    def is_stored(self, date: str) -> bool:
        return self.json_path(date).exists()

    def has_thumbnail(self, date: str) -> bool:
        return self.thumbnail_path(date).exists()

    def read(self, date: str) -> Picture:
        raw = self.json_path(date).read_text(encoding="utf-8")
        payload = json.loads(raw)
        if self.has_thumbnail(date):
            payload["thumbnail_url"] = self.thumbnail_url(date)
        else:
            payload.pop("thumbnail_url", None)
        return Picture.model_validate(payload)

    def write_json(self, date: str, body: bytes) -> Path:
        path = self.json_path(date)
        path.write_bytes(body)
        logger.info("picture_store set date=%s bytes=%d", date, len(body))
        return path

    def clear(self) -> int:
        removed = 0
        for pattern in _MANAGED_PATTERNS:
            for path in sorted(self.directory.glob(pattern)):
                if not path.is_file():
                    continue
                path.unlink()
                removed += 1
        logger.info("picture_store cleared directory=%s removed=%d", self.directory, removed)
        return removed

    def json_path(self, date: str) -> Path:
        return self.directory / f"{date}{JSON_SUFFIX}"

    def thumbnail_path(self, date: str) -> Path:
        return self.directory / f"{date}{THUMBNAIL_SUFFIX}"

    def thumbnail_url(self, date: str) -> str:
        return f"{self.base_url}{date}{THUMBNAIL_SUFFIX}"
