"""Exception taxonomy for content reads and admin mutations."""

from __future__ import annotations


class ContentError(Exception):
    """Base class for content errors surfaced to API callers."""

    status_code: int = 500
    code: str = "content_error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


class StoreUnavailableError(ContentError):
    """Raised when the key-value store cannot be reached."""

    status_code = 503
    code = "store_unavailable"


class ValidationError(ContentError):
    status_code = 400
    code = "validation_error"


class RecordNotFoundError(ContentError):
    status_code = 404
    code = "not_found"


class DuplicateRecordError(ContentError):
    status_code = 409
    code = "duplicate_identifier"


class ConcurrentModificationError(ContentError):
    """Raised when optimistic retries are exhausted for one collection."""

    status_code = 409
    code = "concurrent_modification"


class UnknownCollectionError(ContentError):
    status_code = 404
    code = "unknown_collection"


__all__ = [
    "ContentError",
    "StoreUnavailableError",
    "ValidationError",
    "RecordNotFoundError",
    "DuplicateRecordError",
    "ConcurrentModificationError",
    "UnknownCollectionError",
]
