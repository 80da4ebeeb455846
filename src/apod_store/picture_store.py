from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterator
from datetime import date, datetime, timedelta

import requests
from pydantic import ValidationError

from .client import ApodClient
from .config import StoreConfig
from .errors import (
    DecodeError,
    FetchError,
    PersistenceError,
    ProviderError,
    ThumbnailError,
    TransportError,
)
from .schemas import (
    Failed,
    Fetched,
    Picture,
    Skipped,
    SyncOutcome,
    SyncStats,
    format_date,
    now_in,
)
from .storage import FlatFileStore
from .thumbnails import PillowThumbnailer, Thumbnailer

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 24
_ONE_DAY = timedelta(days=1)


class PictureStore:
    """Keeps a local flat-file copy of the daily picture feed.

    ``synchronize`` walks backward from today to ``start_date`` and fetches
    every day that is not stored yet. ``paginate`` serves stored days without
    touching the network.
    """

    def __init__(
        self,
        config: StoreConfig,
        *,
        session: requests.Session | None = None,
        client: ApodClient | None = None,
        thumbnailer: Thumbnailer | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config
        self.client = client or ApodClient(
            endpoint=config.endpoint,
            api_key=config.api_key,
            timeout_seconds=config.timeout_seconds,
            session=session,
        )
        self.thumbnailer = thumbnailer or PillowThumbnailer(
            session=self.client.session,
            timeout_seconds=config.timeout_seconds,
        )
        self.store = FlatFileStore(config.store_path, config.base_url)
        self._clock = clock or (lambda: now_in(config.zone))

    def __enter__(self) -> PictureStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self.client.close()

    def today(self) -> date:
        return self._clock().astimezone(self.config.zone).date()

    def paginate(self, page: int = 0, page_size: int = DEFAULT_PAGE_SIZE) -> dict[str, Picture]:
        if page < 0:
            raise ValueError("page must be >= 0")
        if page_size < 1:
            raise ValueError("page_size must be >= 1")

        today = self.today()
        start = page * page_size
        pictures: dict[str, Picture] = {}
        for offset in range(start, start + page_size):
            picture_date = format_date(today - timedelta(days=offset))
            if self.store.is_stored(picture_date):
                pictures[picture_date] = self.store.read(picture_date)
        return pictures

    def synchronize(self, *, limit: int | None = None) -> Iterator[SyncOutcome]:
        """Yield one outcome per day from today back to ``start_date``.

        ``limit`` caps the number of fetch attempts; already stored days do
        not count against it.
        """
        if limit is not None and limit < 0:
            raise ValueError("limit must be >= 0")
        return self._walk(limit)

    def update_store(
        self,
        on_new: Callable[[Picture], object] | None = None,
        on_error: Callable[[FetchError], object] | None = None,
        *,
        limit: int | None = None,
    ) -> SyncStats:
        stats = SyncStats()
        for outcome in self.synchronize(limit=limit):
            if isinstance(outcome, Fetched):
                stats.fetched += 1
                if on_new is not None:
                    on_new(outcome.picture)
            elif isinstance(outcome, Failed):
                stats.failed += 1
                if on_error is not None:
                    on_error(outcome.error)
            else:
                stats.skipped += 1

        logger.info(
            "picture_store sync fetched=%d skipped=%d failed=%d",
            stats.fetched,
            stats.skipped,
            stats.failed,
        )
        return stats

    def clear(self) -> int:
        return self.store.clear()

    def is_stored(self, picture_date: str) -> bool:
        return self.store.is_stored(picture_date)

    def read_stored(self, picture_date: str) -> Picture:
        return self.store.read(picture_date)

    def fetch_and_persist(self, picture_date: str) -> Picture:
        body = self.client.fetch_day(picture_date)
        payload = _decode_payload(picture_date, body)

        if payload.get("error") is not None:
            raise ProviderError(picture_date, str(payload["error"]))

        try:
            picture = Picture.model_validate(payload)
        except ValidationError as exc:
            raise DecodeError(picture_date, "response does not match picture schema") from exc

        try:
            self.store.write_json(picture_date, body)
        except OSError as exc:
            raise PersistenceError(picture_date, f"cannot write metadata: {exc}") from exc

        if picture.is_image:
            self._write_thumbnail(picture_date, picture)
            picture = Picture.model_validate(
                {**payload, "thumbnail_url": self.store.thumbnail_url(picture_date)}
            )

        logger.info(
            "picture_store fetched date=%s media_type=%s",
            picture_date,
            picture.media_type,
        )
        return picture

    def _walk(self, limit: int | None) -> Iterator[SyncOutcome]:
        current = self.today()
        attempts = 0
        while current >= self.config.start_date:
            picture_date = format_date(current)
            current -= _ONE_DAY

            if self.store.is_stored(picture_date):
                yield Skipped(picture_date)
                continue

            if limit is not None and attempts >= limit:
                logger.info("picture_store sync limit reached limit=%d", limit)
                return
            attempts += 1

            try:
                picture = self.fetch_and_persist(picture_date)
            except FetchError as exc:
                logger.exception("picture_store fetch failed date=%s", picture_date)
                yield Failed(picture_date, exc)
                continue

            yield Fetched(picture_date, picture)

    def _write_thumbnail(self, picture_date: str, picture: Picture) -> None:
        if not picture.url:
            raise ThumbnailError(picture_date, "image entry has no url")

        try:
            image = self.thumbnailer.load_image(picture.url)
        except requests.RequestException as exc:
            raise TransportError(picture_date, f"media request failed: {exc}") from exc
        except Exception as exc:
            raise ThumbnailError(picture_date, f"cannot decode image: {exc}") from exc

        try:
            thumbnail = self.thumbnailer.fit_to_box(
                image,
                self.config.thumbnail_width,
                self.config.thumbnail_height,
            )
        except Exception as exc:
            raise ThumbnailError(picture_date, f"cannot resize image: {exc}") from exc

        thumbnail_path = self.store.thumbnail_path(picture_date)
        try:
            self.thumbnailer.save(thumbnail, thumbnail_path)
        except OSError as exc:
            thumbnail_path.unlink(missing_ok=True)
            raise PersistenceError(picture_date, f"cannot write thumbnail: {exc}") from exc
        except Exception as exc:
            thumbnail_path.unlink(missing_ok=True)
            raise ThumbnailError(picture_date, f"cannot encode thumbnail: {exc}") from exc


def _decode_payload(picture_date: str, body: bytes) -> dict[str, object]:
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DecodeError(picture_date, "Could not decode response as JSON") from exc

    if not isinstance(payload, dict):
        raise DecodeError(picture_date, "response root must be a JSON object")
    return payload
