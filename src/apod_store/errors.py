from __future__ import annotations


class ApodStoreError(Exception):
    """Base class for picture store errors."""


class ConfigurationError(ApodStoreError, ValueError):
    """Raised when the store configuration is missing or invalid."""


class FetchError(ApodStoreError):
    """A single day could not be fetched and persisted."""

    def __init__(self, date: str, message: str) -> None:
        super().__init__(message)
        self.date = date
        self.message = message

    def __str__(self) -> str:
        return f"{self.date}: {self.message}"


class TransportError(FetchError):
    pass


class DecodeError(FetchError):
    pass


class ProviderError(FetchError):
    pass


class PersistenceError(FetchError):
    pass


class ThumbnailError(FetchError):
    pass
