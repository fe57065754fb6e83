"""
Error taxonomy for the image catalog.

Every error carries a human-readable message plus keyword context
(offending ids, filter dimension, ...) so callers can log it and decide
on user-facing messaging. The API layer maps each class to an HTTP status.
"""

from typing import Any

from fastapi import status


class CatalogError(Exception):
    """Base catalog error."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context


class InvalidArgumentError(CatalogError):
    """Raised when a caller passes an unrecognized sort order or filter value."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(CatalogError):
    """Raised when the requested image does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class InternalError(CatalogError):
    """Raised when the store fails; the original exception is chained as __cause__."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
