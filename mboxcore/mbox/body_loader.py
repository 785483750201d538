"""
Random-access loading of a single message by byte span.
"""

from __future__ import annotations

import os
from typing import Union

from mboxcore.errors import InvalidSpanError
from mboxcore.logger import get_logger
from mboxcore.mbox.archive import ArchiveHandle
from mboxcore.mbox.content_cleaner import ContentCleaner
from mboxcore.models import BodyLoadResult, BodyStatus, MessageIndexEntry

logger = get_logger(__name__)


class BodyLoader:
    """Reads ``[offset, offset + length)`` from an archive and decodes it."""

    @staticmethod
    def load(handle: ArchiveHandle, offset: int, length: int) -> BodyLoadResult:
        """
        Load one message span.

        Raises ``InvalidSpanError`` when the span is negative or reaches past
        the end of the archive. Bytes that neither UTF-8 nor Latin-1 accept
        yield an ``UNDECODABLE`` result instead of an exception.
        """
        total = handle.total_bytes
        if offset < 0 or length < 0 or (total and offset + length > total):
            raise InvalidSpanError(offset, length, total)

        data = handle.read_at(offset, length)
        if len(data) != length:
            raise InvalidSpanError(offset, length, total)

        decoded = ContentCleaner.decode_text(data)
        if decoded is None:
            logger.warning("Undecodable body at offset=%d length=%d in %s", offset, length, handle.name)
            return BodyLoadResult(status=BodyStatus.UNDECODABLE)

        text, encoding = decoded
        if encoding != "utf-8":
            logger.debug("Body at offset=%d decoded as %s", offset, encoding)
        return BodyLoadResult(status=BodyStatus.DECODED, text=text, encoding=encoding)

    @classmethod
    def load_entry(cls, handle: ArchiveHandle, entry: MessageIndexEntry) -> BodyLoadResult:
        return cls.load(handle, entry.body_offset, entry.body_length)

    @classmethod
    def load_path(cls, path: Union[str, "os.PathLike[str]"], offset: int, length: int) -> BodyLoadResult:
        """Open *path*, load one span, and close the file again."""
        with ArchiveHandle.open(path) as handle:
            return cls.load(handle, offset, length)
