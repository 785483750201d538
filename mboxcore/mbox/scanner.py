"""
Streaming mbox scanner.

Reads the archive in fixed-size chunks, splits complete lines out of a
rolling byte buffer, and drives a small per-message state machine
(delimiter → headers → body) that turns every message into a
``MessageIndexEntry``. Memory use is bounded by the chunk size plus the
longest line (capped by ``MAX_LINE_BYTES``), independent of archive size.

Byte offsets are tracked on the raw bytes, so ``body_offset`` /
``body_length`` always address the exact span of a message in the file:
from the first byte after its ``From `` delimiter line up to the start of
the next delimiter line (or EOF).
"""

from __future__ import annotations

import uuid
from typing import Callable, Iterator, List, Optional

from mboxcore.config import get_settings
from mboxcore.logger import get_logger
from mboxcore.mbox.address_parser import AddressParser
from mboxcore.mbox.archive import ArchiveHandle, ArchiveSource
from mboxcore.mbox.config import (
    DEFAULT_SUBJECT,
    DELIMITER_PREFIX,
    MULTIPART_MIXED,
    WEEKDAY_TOKENS,
)
from mboxcore.mbox.content_cleaner import ContentCleaner
from mboxcore.mbox.date_parser import DateParser
from mboxcore.mbox.headers import HeaderBlock, decode_mime_header
from mboxcore.models import MessageIndexEntry, ScanProgress

logger = get_logger(__name__)

ProgressCallback = Callable[[ScanProgress], None]
StopCallback = Callable[[], bool]


class _MessageBuilder:
    """Accumulates one message at a time and finalizes it into an entry."""

    def __init__(self, preview_length: int) -> None:
        self.preview_length = preview_length
        self.dropped_lines = 0
        self.skipped_messages = 0
        self._reset(0)

    def _reset(self, start_offset: int) -> None:
        self.start_offset = start_offset
        self.headers = HeaderBlock()
        self.in_headers = True
        self.body_lines: List[str] = []
        self.body_chars = 0

    # ------------------------------------------------------------------
    # Line handling
    # ------------------------------------------------------------------

    def feed(self, raw: bytes, line_start: int, line_end: int) -> Optional[MessageIndexEntry]:
        """Process one physical line spanning ``[line_start, line_end)``.

        Returns the finished previous message when the line is a delimiter.
        """
        if raw.endswith(b"\r"):
            raw = raw[:-1]
        decoded = ContentCleaner.decode_text(raw)
        if decoded is None:
            self.dropped_lines += 1
            logger.warning("Dropped undecodable line at offset %d", line_start)
            return None
        line = decoded[0]

        if MboxScanner.is_delimiter(line):
            entry = self.finish(line_start)
            self._reset(line_end)
            return entry

        if self.in_headers:
            if not line:
                self.in_headers = False
            else:
                self.headers.feed_line(line)
            return None

        if self.body_chars < self.preview_length * 2:
            clean = ContentCleaner.strip_tags(line)
            if clean.strip():
                self.body_lines.append(clean)
                self.body_chars += len(clean)
        return None

    def finish(self, end_offset: int) -> Optional[MessageIndexEntry]:
        """Finalize the pending message ending at *end_offset* (exclusive)."""
        if not len(self.headers):
            return None
        try:
            return self._build_entry(end_offset)
        except Exception as exc:  # noqa: BLE001
            self.skipped_messages += 1
            logger.warning("Skipping malformed message at offset %d: %s", self.start_offset, exc)
            return None

    # ------------------------------------------------------------------
    # Entry construction
    # ------------------------------------------------------------------

    def _build_entry(self, end_offset: int) -> MessageIndexEntry:
        headers = self.headers

        message_id = headers.get("Message-ID")
        if not message_id:
            message_id = str(uuid.uuid4())
            logger.debug("Message at offset %d has no Message-ID; generated %s", self.start_offset, message_id)

        raw_subject = headers.get("Subject")
        subject = decode_mime_header(raw_subject) if raw_subject is not None else DEFAULT_SUBJECT

        raw_date = headers.get("Date")
        date = DateParser.parse_header_date(raw_date)
        if date is None:
            logger.debug("Message %s: unparseable date %r, using sentinel", message_id, raw_date)
            date = DateParser.SENTINEL

        content_type = (headers.get("Content-Type") or "").lower()

        return MessageIndexEntry(
            message_id=message_id,
            sender=AddressParser.extract(decode_mime_header(headers.get("From", ""))),
            recipient=AddressParser.extract(decode_mime_header(headers.get("To", ""))),
            subject=subject,
            date=date,
            body_preview=ContentCleaner.build_preview(self.body_lines, self.preview_length),
            body_offset=self.start_offset,
            body_length=max(0, end_offset - self.start_offset),
            has_attachments=MULTIPART_MIXED in content_type,
        )


class MboxScanner:
    """Single-pass, bounded-memory indexer for mbox archives."""

    def __init__(
        self,
        chunk_size: Optional[int] = None,
        preview_length: Optional[int] = None,
        max_line_bytes: Optional[int] = None,
    ) -> None:
        settings = get_settings()
        self.chunk_size = chunk_size or settings.CHUNK_SIZE
        self.preview_length = preview_length or settings.PREVIEW_LENGTH
        self.max_line_bytes = max_line_bytes or settings.MAX_LINE_BYTES

    @staticmethod
    def is_delimiter(line: str) -> bool:
        """``From `` line that also carries an ``@`` or a weekday token."""
        if not line.startswith(DELIMITER_PREFIX):
            return False
        return "@" in line or any(token in line for token in WEEKDAY_TOKENS)

    def scan(
        self,
        source: ArchiveSource,
        on_progress: Optional[ProgressCallback] = None,
        should_stop: Optional[StopCallback] = None,
    ) -> Iterator[MessageIndexEntry]:
        """Index every message of *source* in file order.

        The archive is opened immediately, so an unreadable path raises
        ``UnreadableArchiveError`` from this call. The returned iterator is
        lazy and can be consumed once; *should_stop* is polled before each
        chunk read and ends the scan early when it returns True.
        """
        handle, owned = ArchiveHandle.coerce(source)
        logger.info("Scan start: %s (%d bytes)", handle.name, handle.total_bytes)
        return self._iter_entries(handle, owned, on_progress, should_stop)

    def _iter_entries(
        self,
        handle: ArchiveHandle,
        owned: bool,
        on_progress: Optional[ProgressCallback],
        should_stop: Optional[StopCallback],
    ) -> Iterator[MessageIndexEntry]:
        builder = _MessageBuilder(self.preview_length)
        buffer = bytearray()
        buffer_offset = 0
        position = 0
        emitted = 0
        try:
            while True:
                if should_stop is not None and should_stop():
                    logger.info("Scan cancelled: %s after %d bytes (%d messages)", handle.name, position, emitted)
                    return
                chunk = handle.read_at(position, self.chunk_size)
                if not chunk:
                    break
                position += len(chunk)
                buffer += chunk

                start = 0
                while True:
                    newline = buffer.find(b"\n", start)
                    if newline < 0:
                        break
                    entry = builder.feed(
                        bytes(buffer[start:newline]), buffer_offset + start, buffer_offset + newline + 1
                    )
                    start = newline + 1
                    if entry is not None:
                        emitted += 1
                        yield entry
                if start:
                    del buffer[:start]
                    buffer_offset += start

                if len(buffer) > self.max_line_bytes:
                    # Over-long line: hand it to the builder as a fragment.
                    end = buffer_offset + len(buffer)
                    entry = builder.feed(bytes(buffer), buffer_offset, end)
                    buffer.clear()
                    buffer_offset = end
                    if entry is not None:
                        emitted += 1
                        yield entry

                if on_progress is not None:
                    on_progress(ScanProgress(bytes_read=position, total_bytes=handle.total_bytes))

            if buffer:
                entry = builder.feed(bytes(buffer), buffer_offset, buffer_offset + len(buffer))
                buffer.clear()
                if entry is not None:
                    emitted += 1
                    yield entry

            entry = builder.finish(position)
            if entry is not None:
                emitted += 1
                yield entry

            logger.info(
                "Scan done: %s (messages=%d, dropped_lines=%d, skipped_messages=%d)",
                handle.name,
                emitted,
                builder.dropped_lines,
                builder.skipped_messages,
            )
        finally:
            if owned:
                handle.close()


def scan_archive(
    source: ArchiveSource,
    on_progress: Optional[ProgressCallback] = None,
    should_stop: Optional[StopCallback] = None,
) -> Iterator[MessageIndexEntry]:
    """Scan *source* with default settings. See :meth:`MboxScanner.scan`."""
    return MboxScanner().scan(source, on_progress=on_progress, should_stop=should_stop)
