"""Exceptions raised by the catalog core."""


class CatalogError(Exception):
    """Base class for catalog errors surfaced to callers."""


class ValidationError(CatalogError):
    """A filter, payload or parameter value was malformed."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class CapacityError(CatalogError):
    """The service is saturated; the caller should retry shortly."""

    def __init__(self, message: str = "Service is at capacity", retry_after: int = 5):
        self.retry_after = retry_after
        super().__init__(message)


class StorageUnavailableError(CatalogError):
    """The database could not be reached after the allowed attempts."""
