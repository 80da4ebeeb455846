"""Flat-file storage for daily picture records."""

from .store import JSON_SUFFIX, THUMBNAIL_SUFFIX, FlatFileStore

__all__ = ["FlatFileStore", "JSON_SUFFIX", "THUMBNAIL_SUFFIX"]
