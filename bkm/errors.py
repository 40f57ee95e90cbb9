"""
Error types for bkm.

Every error raised by the store, the codec and the service layer derives
from BkmError and carries a client-facing status plus a short message, so
an outer transport can report failures without knowing their origin.
"""
import logging
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


class BkmError(Exception):
    """Base class for all bkm errors."""

    status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BkmError, ValueError):
    """A required field is missing or empty."""

    status = 400


class CycleError(ValidationError):
    """A folder move would make a folder its own ancestor."""


class NotFoundError(BkmError, LookupError):
    """A mutation targeted a folder or bookmark that does not exist."""

    status = 404

    def __init__(self, kind: str, id: Optional[int]):
        super().__init__(f"{kind} {id} not found")
        self.kind = kind
        self.id = id


class DecodeError(BkmError):
    """A bookmark file could not be parsed as the Netscape format."""

    status = 400


class FaviconError(BkmError):
    """The icon provider could not deliver an icon."""

    status = 502


class StorageError(BkmError):
    """The storage engine failed (connection, constraint, SQL)."""

    status = 500

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


def error_response(exc: BaseException) -> Tuple[int, str]:
    """
    Map an exception to a client status and a short message.

    Args:
        exc: Any exception raised while serving a request

    Returns:
        (status, message) tuple
    """
    if isinstance(exc, BkmError):
        return exc.status, exc.message
    logger.error("Unexpected error: %s", exc, exc_info=exc)
    return 500, "internal error"
