"""Local flat-file cache for a daily picture API."""

from .config import StoreConfig, build_config, load_config
from .errors import (
    ApodStoreError,
    ConfigurationError,
    DecodeError,
    FetchError,
    PersistenceError,
    ProviderError,
    ThumbnailError,
    TransportError,
)
from .picture_store import PictureStore
from .schemas import Failed, Fetched, MediaType, Picture, Skipped, SyncOutcome, SyncStats

__all__ = [
    "ApodStoreError",
    "ConfigurationError",
    "DecodeError",
    "Failed",
    "FetchError",
    "Fetched",
    "MediaType",
    "PersistenceError",
    "Picture",
    "PictureStore",
    "ProviderError",
    "Skipped",
    "StoreConfig",
    "SyncOutcome",
    "SyncStats",
    "ThumbnailError",
    "TransportError",
    "build_config",
    "load_config",
]
