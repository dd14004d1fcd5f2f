"""Exception types raised by the harvest toolkit.

Every error carries enough context (URL, status code, row/column) to be
diagnosed from the message alone.
"""

from __future__ import annotations

from typing import Any, Optional


class HarvestError(Exception):
    """Base class for all toolkit errors."""


class InvalidInputError(HarvestError, ValueError):
    """Malformed construction input (bad base URL, bad segment, bad cursor)."""


class HttpFailureError(HarvestError):
    """The server answered outside 2xx, or the transport failed."""

    def __init__(self, url: str, status_code: Optional[int], reason: str):
        self.url = url
        self.status_code = status_code
        self.reason = reason
        status = status_code if status_code is not None else "no response"
        super().__init__(f"GET {url} failed ({status}): {reason}")


class ParseError(HarvestError):
    """The body could not be read in the declared format."""

    def __init__(self, reason: str, url: Optional[str] = None):
        self.url = url
        self.reason = reason
        where = f" [{url}]" if url else ""
        super().__init__(f"{reason}{where}")


class TypeCoercionError(HarvestError, ValueError):
    def __init__(self, row: int, column: str, value: Any, reason: str = ""):
        self.row = row
        self.column = column
        self.value = value
        msg = f"row {row}, column '{column}': cannot coerce {value!r}"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)


class OperationCancelled(HarvestError):
    """Raised between fetches when the caller's cancel event is set."""
