"""
Background scan delivered through a bounded queue.

``ScanStream`` runs an :class:`MboxScanner` on a daemon thread and hands the
resulting entries to a single consumer. The queue is bounded, so a slow
consumer blocks the producer instead of letting entries pile up in memory.
Cancelling (explicitly, via ``close()``, or by abandoning the iterator) stops
the scan before its next chunk read and releases the archive.
"""

from __future__ import annotations

import queue
import threading
from typing import Iterator, Optional, Union

from mboxcore.config import get_settings
from mboxcore.errors import ScanStreamError
from mboxcore.logger import get_logger
from mboxcore.mbox.archive import ArchiveHandle, ArchiveSource
from mboxcore.mbox.scanner import MboxScanner, ProgressCallback
from mboxcore.models import MessageIndexEntry

logger = get_logger(__name__)

_POLL_SECONDS = 0.05


class _Done:
    pass


class _Failure:
    def __init__(self, exc: Exception) -> None:
        self.exc = exc


_DONE = _Done()

_Item = Union[MessageIndexEntry, _Done, _Failure]


class ScanStream:
    """Single-consumer, single-pass stream of index entries."""

    def __init__(
        self,
        source: ArchiveSource,
        on_progress: Optional[ProgressCallback] = None,
        buffer_size: Optional[int] = None,
        scanner: Optional[MboxScanner] = None,
    ) -> None:
        self._scanner = scanner or MboxScanner()
        self._handle, self._owned = ArchiveHandle.coerce(source)
        self._on_progress = on_progress
        self._queue: "queue.Queue[_Item]" = queue.Queue(
            maxsize=buffer_size or get_settings().STREAM_BUFFER_SIZE
        )
        self._cancelled = threading.Event()
        self._released = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._consumed = False

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def total_bytes(self) -> int:
        return self._handle.total_bytes

    @property
    def name(self) -> str:
        return self._handle.name

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def pending(self) -> int:
        """Entries produced but not yet consumed."""
        return self._queue.qsize()

    @property
    def buffer_size(self) -> int:
        return self._queue.maxsize

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # ------------------------------------------------------------------
    # Producer
    # ------------------------------------------------------------------

    def start(self) -> "ScanStream":
        """Start the background scan; a no-op if it is already running."""
        if self._thread is None:
            self._thread = threading.Thread(
                target=self._run, name=f"mbox-scan:{self._handle.name}", daemon=True
            )
            self._thread.start()
        return self

    def _run(self) -> None:
        try:
            entries = self._scanner.scan(self._handle, self._on_progress, self._cancelled.is_set)
            try:
                for entry in entries:
                    if not self._put(entry):
                        break
            finally:
                entries.close()
        except Exception as exc:
            logger.error("Scan of %s failed: %s", self._handle.name, exc)
            self._put(_Failure(exc))
        finally:
            self._release()
            self._put(_DONE)

    def _put(self, item: _Item) -> bool:
        """Block until there is room or the stream is cancelled."""
        while not self._cancelled.is_set():
            try:
                self._queue.put(item, timeout=_POLL_SECONDS)
                return True
            except queue.Full:
                continue
        return False

    def _release(self) -> None:
        if self._released.is_set():
            return
        self._released.set()
        if self._owned:
            self._handle.close()

    # ------------------------------------------------------------------
    # Consumer
    # ------------------------------------------------------------------

    def __iter__(self) -> Iterator[MessageIndexEntry]:
        if self._consumed:
            raise ScanStreamError("ScanStream can only be iterated once")
        self._consumed = True
        self.start()
        return self._iterate()

    def _iterate(self) -> Iterator[MessageIndexEntry]:
        finished = False
        try:
            while not self._cancelled.is_set():
                try:
                    item = self._queue.get(timeout=_POLL_SECONDS)
                except queue.Empty:
                    if not self.is_alive() and self._queue.empty():
                        finished = True
                        return
                    continue
                if item is _DONE:
                    finished = True
                    return
                if isinstance(item, _Failure):
                    finished = True
                    raise item.exc
                yield item
        finally:
            if not finished:
                # abandoned mid-stream
                self.cancel()

    def cancel(self) -> None:
        """Ask the producer to stop; entries already queued are discarded."""
        self._cancelled.set()

    def close(self) -> None:
        """Cancel, wait for the producer to exit, and release the archive."""
        self.cancel()
        if self._thread is not None:
            self._thread.join()
        self._release()

    def __enter__(self) -> "ScanStream":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
