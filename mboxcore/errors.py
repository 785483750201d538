"""
Typed exceptions for mboxcore.

Everything raised on purpose by this package derives from ``MboxCoreError``,
so callers can catch the whole family with one clause and still tell the
conditions apart by type or by ``error_code``.

Conditions that must never abort a scan (undecodable line, unparseable
date, missing Message-ID, malformed multipart boundary) are not exceptions:
they are logged and replaced by a default value where they occur.
"""

from __future__ import annotations

from typing import Optional


class MboxCoreError(Exception):
    """
    Base class for all mboxcore errors.

    Attributes:
        error_code: machine-readable code such as ``"ARCHIVE-001"``.
    """

    error_code: Optional[str] = None

    def __init__(self, message: str, error_code: Optional[str] = None):
        if error_code is not None:
            self.error_code = error_code
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to a dictionary for JSON logging or display."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": str(self),
        }


class UnreadableArchiveError(MboxCoreError):
    """The archive cannot be opened, is not seekable, or a read failed."""

    error_code = "ARCHIVE-001"

    def __init__(self, source: str, reason: Optional[BaseException] = None):
        self.source = source
        self.reason = reason
        detail = f": {reason}" if reason is not None else ""
        super().__init__(f"Cannot read mbox archive {source}{detail}")


class InvalidSpanError(MboxCoreError, ValueError):
    """An (offset, length) pair does not denote a byte span inside the archive."""

    error_code = "ARCHIVE-002"

    def __init__(self, offset: int, length: int, total_bytes: int):
        self.offset = offset
        self.length = length
        self.total_bytes = total_bytes
        super().__init__(
            f"Span offset={offset} length={length} is outside the archive (size={total_bytes})"
        )


class UndecodableBodyError(MboxCoreError):
    """A message body could not be decoded as UTF-8 or Latin-1."""

    error_code = "BODY-001"


class ScanStreamError(MboxCoreError):
    """A scan stream was used in a way its single forward pass does not allow."""

    error_code = "STREAM-001"
