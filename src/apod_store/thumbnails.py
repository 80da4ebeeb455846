"""Thumbnail generation for image entries."""

from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import Any, Protocol

import requests
from PIL import Image, ImageOps

logger = logging.getLogger(__name__)

_JPEG_MODES = {"RGB", "L"}


class Thumbnailer(Protocol):
    def load_image(self, url: str) -> Any:
        """Load the image found at url."""

    def fit_to_box(self, image: Any, width: int, height: int) -> Any:
        """Crop and resize image to fill exactly width x height."""

    def save(self, image: Any, path: Path) -> None:
        """Write image to path."""


class PillowThumbnailer:
    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        timeout_seconds: float = 10.0,
        jpeg_quality: int = 85,
    ) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        if not 1 <= jpeg_quality <= 95:
            raise ValueError("jpeg_quality must be between 1 and 95")

        self.session = session or requests.Session()
        self.timeout_seconds = timeout_seconds
        self.jpeg_quality = jpeg_quality

    def load_image(self, url: str) -> Image.Image:
        response = self.session.get(url, timeout=self.timeout_seconds)
        response.raise_for_status()

        image = Image.open(BytesIO(response.content))
        image.load()
        logger.debug("thumbnail loaded url=%s size=%sx%s", url, *image.size)
        return image

    def fit_to_box(self, image: Image.Image, width: int, height: int) -> Image.Image:
        if width < 1 or height < 1:
            raise ValueError("thumbnail box must be at least 1x1")
        return ImageOps.fit(image, (width, height), method=Image.Resampling.LANCZOS)

    def save(self, image: Image.Image, path: Path) -> None:
        if image.mode not in _JPEG_MODES:
            image = image.convert("RGB")
        image.save(path, format="JPEG", quality=self.jpeg_quality)
