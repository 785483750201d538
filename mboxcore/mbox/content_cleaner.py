"""
Text helpers shared across the mbox engine.

Responsibilities:
- Byte → text decoding with the UTF-8 → Latin-1 fallback chain.
- Naive per-line tag stripping and preview assembly for index entries.
- HTML escaping for plain-text rendering.
"""

from __future__ import annotations

import html as _html
from typing import List, Optional, Tuple

from mboxcore.mbox.config import PREVIEW_TAG_RE

FALLBACK_ENCODINGS = ("utf-8", "latin-1")


class ContentCleaner:
    """Stateless utilities for decoding and cleaning message text."""

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    @staticmethod
    def decode_text(data: bytes) -> Optional[Tuple[str, str]]:
        """Decode *data* as UTF-8, then Latin-1.

        Returns ``(text, encoding)`` or *None* when no encoding in the
        chain accepts the bytes.
        """
        for encoding in FALLBACK_ENCODINGS:
            try:
                return data.decode(encoding), encoding
            except UnicodeDecodeError:
                continue
        return None

    @staticmethod
    def decode_payload(payload: bytes, charset: Optional[str] = None) -> str:
        """Decode a MIME part payload: declared charset, then UTF-8, then Latin-1."""
        candidates: List[str] = []
        if charset:
            candidates.append(charset.strip().strip("\"'"))
        candidates.extend(FALLBACK_ENCODINGS)
        for encoding in candidates:
            try:
                return payload.decode(encoding)
            except (LookupError, UnicodeDecodeError):
                continue
        return payload.decode("utf-8", errors="replace")

    # ------------------------------------------------------------------
    # Preview
    # ------------------------------------------------------------------

    @staticmethod
    def strip_tags(line: str) -> str:
        """Remove anything that looks like ``<tag ...>`` from a single line."""
        return PREVIEW_TAG_RE.sub("", line)

    @staticmethod
    def build_preview(lines: List[str], limit: int) -> str:
        """Join preview lines with spaces and cut to *limit* characters."""
        text = " ".join(lines)[:limit]
        return text.replace("\n", " ").strip()

    # ------------------------------------------------------------------
    # HTML
    # ------------------------------------------------------------------

    @staticmethod
    def escape_html(text: str) -> str:
        return _html.escape(text, quote=False)
