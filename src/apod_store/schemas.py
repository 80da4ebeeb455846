from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum
from typing import Any
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field

from .errors import FetchError

DATE_FORMAT = "%Y-%m-%d"


def now_in(zone: ZoneInfo) -> datetime:
    return datetime.now(tz=zone)


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


class MediaType(StrEnum):
    IMAGE = "image"
    VIDEO = "video"


class Picture(BaseModel):
    """One day of provider metadata.

    Provider fields beyond ``media_type`` and ``url`` (title, explanation,
    hdurl, concept_tags, ...) are kept as extra fields so a stored record
    round-trips without loss.
    """

    model_config = ConfigDict(extra="allow")

    media_type: MediaType | str = Field(union_mode="left_to_right")
    url: str | None = None
    thumbnail_url: str | None = None

    @property
    def is_image(self) -> bool:
        return self.media_type == MediaType.IMAGE

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True)


@dataclass(slots=True, frozen=True)
class Fetched:
    date: str
    picture: Picture


@dataclass(slots=True, frozen=True)
class Skipped:
    date: str


@dataclass(slots=True, frozen=True)
class Failed:
    date: str
    error: FetchError


SyncOutcome = Fetched | Skipped | Failed


@dataclass(slots=True)
class SyncStats:
    fetched: int = 0
    skipped: int = 0
    failed: int = 0
