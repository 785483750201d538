"""
RFC 822 header block handling shared by the scanner and the MIME decoder.

Headers are kept as an ordered, append-only list of ``(key, value)`` pairs.
A folded (continuation) line always extends the most recently *inserted*
header, which is tracked by index; header order in a message is
significant and unrelated to the alphabetical order of the keys.
"""

from __future__ import annotations

from email.errors import HeaderParseError
from email.header import decode_header
from typing import Iterable, List, Optional, Tuple

from mboxcore.mbox.config import CONTINUATION_PREFIXES, HEADER_LINE_RE


class HeaderBlock:
    """Ordered header record, duplicates allowed, case-insensitive lookup."""

    def __init__(self) -> None:
        self._items: List[List[str]] = []
        self._last_index: Optional[int] = None

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def add(self, key: str, value: str) -> None:
        self._items.append([key, value])
        self._last_index = len(self._items) - 1

    def continue_last(self, text: str) -> bool:
        """Append a folded line to the last inserted header.

        Returns *False* (and drops the text) when no header exists yet.
        """
        if self._last_index is None:
            return False
        item = self._items[self._last_index]
        folded = text.strip()
        item[1] = f"{item[1]} {folded}" if item[1] else folded
        return True

    def feed_line(self, line: str) -> bool:
        """Consume one physical header line.

        Returns *True* if the line was a continuation or a ``Key: Value``
        header, *False* if it had an unknown shape and was ignored.
        """
        if line.startswith(CONTINUATION_PREFIXES):
            return self.continue_last(line)
        match = HEADER_LINE_RE.match(line)
        if not match:
            return False
        self.add(match.group(1), match.group(2).strip())
        return True

    @classmethod
    def parse(cls, text: str) -> "HeaderBlock":
        """Parse a header section, stopping at the first blank line."""
        block = cls()
        for line in text.split("\n"):
            line = line.rstrip("\r")
            if not line:
                break
            block.feed_line(line)
        return block

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Last value for *name*, compared case-insensitively."""
        wanted = name.lower()
        for key, value in reversed(self._items):
            if key.lower() == wanted:
                return value
        return default

    def get_all(self, name: str) -> List[str]:
        wanted = name.lower()
        return [value for key, value in self._items if key.lower() == wanted]

    def items(self) -> List[Tuple[str, str]]:
        return [(key, value) for key, value in self._items]

    def keys(self) -> Iterable[str]:
        return [key for key, _ in self._items]

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def __repr__(self) -> str:
        return f"HeaderBlock({self.items()!r})"


def decode_mime_header(header_value: Optional[str]) -> str:
    """Decode RFC 2047 encoded words (``=?utf-8?q?...?=``) into a plain string."""
    if not header_value:
        return ""
    try:
        decoded_parts = decode_header(header_value)
    except HeaderParseError:
        return header_value
    decoded_string = ""
    for part, encoding in decoded_parts:
        if isinstance(part, bytes):
            try:
                if encoding:
                    decoded_string += part.decode(encoding, errors="ignore")
                else:
                    # Unencoded text between encoded words comes back as raw-unicode-escape bytes
                    decoded_string += part.decode("raw-unicode-escape")
            except UnicodeDecodeError:
                decoded_string += part.decode("latin-1")
            except LookupError:
                decoded_string += part.decode("utf-8", errors="ignore")
        else:
            decoded_string += part
    return decoded_string
