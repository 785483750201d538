"""
Seekable byte source shared by the scanner and the body loader.
"""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import BinaryIO, Optional, Tuple, Union

from mboxcore.errors import UnreadableArchiveError
from mboxcore.logger import get_logger

logger = get_logger(__name__)

ArchiveSource = Union[str, "os.PathLike[str]", "ArchiveHandle", BinaryIO]


class ArchiveHandle:
    """An open, seekable archive plus its total length.

    Every read goes through :meth:`read_at`, which performs the seek and the
    read under one lock, so a single handle may be shared by a scan and any
    number of concurrent body loads.
    """

    def __init__(
        self,
        fileobj: BinaryIO,
        total_bytes: Optional[int] = None,
        name: Optional[str] = None,
        owns_file: bool = False,
    ) -> None:
        self.name = name or str(getattr(fileobj, "name", "<stream>"))
        if not _is_seekable(fileobj):
            raise UnreadableArchiveError(self.name, ValueError("archive stream is not seekable"))
        self._file = fileobj
        self._owns_file = owns_file
        self._lock = threading.Lock()
        self.total_bytes = total_bytes if total_bytes is not None else self._measure()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def open(cls, path: Union[str, "os.PathLike[str]"]) -> "ArchiveHandle":
        """Open *path* for reading; the returned handle owns the file."""
        path = Path(path)
        try:
            fileobj = open(path, "rb")
        except OSError as exc:
            logger.error("Cannot open archive %s: %s", path, exc)
            raise UnreadableArchiveError(str(path), exc) from exc
        try:
            size: Optional[int] = os.fstat(fileobj.fileno()).st_size
        except OSError:
            size = None
        return cls(fileobj, total_bytes=size, name=str(path), owns_file=True)

    @classmethod
    def coerce(cls, source: ArchiveSource) -> Tuple["ArchiveHandle", bool]:
        """Turn a path, handle, or binary file object into a handle.

        Returns ``(handle, owned)``; *owned* is True when the handle was
        opened here and must be closed by the caller of ``coerce``.
        """
        if isinstance(source, ArchiveHandle):
            return source, False
        if isinstance(source, (str, os.PathLike)):
            return cls.open(source), True
        return cls(source), False

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def read_at(self, offset: int, length: int) -> bytes:
        """Read up to *length* bytes starting at *offset* (fewer only at EOF)."""
        if length <= 0:
            return b""
        chunks = []
        with self._lock:
            try:
                self._file.seek(offset)
                remaining = length
                while remaining > 0:
                    data = self._file.read(remaining)
                    if not data:
                        break
                    chunks.append(data)
                    remaining -= len(data)
            except (OSError, ValueError) as exc:
                raise UnreadableArchiveError(self.name, exc) from exc
        return b"".join(chunks)

    def _measure(self) -> int:
        with self._lock:
            try:
                position = self._file.tell()
                end = self._file.seek(0, os.SEEK_END)
                self._file.seek(position)
            except (OSError, ValueError, AttributeError):
                return 0
        return int(end or 0)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return bool(getattr(self._file, "closed", False))

    def close(self) -> None:
        """Close the underlying file if this handle opened it."""
        if self._owns_file and not self.closed:
            self._file.close()

    def __enter__(self) -> "ArchiveHandle":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"ArchiveHandle(name={self.name!r}, total_bytes={self.total_bytes})"


def _is_seekable(fileobj: BinaryIO) -> bool:
    seekable = getattr(fileobj, "seekable", None)
    if seekable is None:
        return hasattr(fileobj, "seek")
    try:
        return bool(seekable())
    except ValueError:
        return False
