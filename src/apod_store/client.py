from __future__ import annotations

import logging

import requests

from .errors import TransportError

logger = logging.getLogger(__name__)


class ApodClient:
    """Minimal GET client for the daily picture endpoint."""

    def __init__(
        self,
        *,
        endpoint: str,
        api_key: str,
        timeout_seconds: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        if not endpoint.strip():
            raise ValueError("endpoint is empty.")
        if not api_key.strip():
            raise ValueError("api_key is empty.")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0.")

        self.endpoint = endpoint
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self._owns_session = session is None
        self.session = session or requests.Session()

    def fetch_day(self, date: str) -> bytes:
        """Return the raw response body for one day."""
        params = {
            "api_key": self.api_key,
            "date": date,
            "concept_tags": "true",
        }
        try:
            response = self.session.get(
                self.endpoint,
                params=params,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise TransportError(date, f"request failed: {exc}") from exc

        logger.debug("apod_client fetched date=%s bytes=%d", date, len(response.content))
        return response.content

    def close(self) -> None:
        if self._owns_session:
            self.session.close()
