"""
From/To header normalisation.
"""

from __future__ import annotations

from typing import Optional

from mboxcore.mbox.config import ADDRESS_TRIM_CHARS, ANGLE_ADDRESS_RE


class AddressParser:
    """Reduce a raw address header to the string shown in a message list."""

    @staticmethod
    def extract(raw: Optional[str]) -> str:
        """``"Jane Doe" <jane@example.com>`` -> ``Jane Doe``;
        ``<jane@example.com>`` -> ``jane@example.com``;
        anything else is returned trimmed and unquoted."""
        if not raw:
            return ""
        match = ANGLE_ADDRESS_RE.match(raw.strip())
        if match:
            name = match.group("name").strip(ADDRESS_TRIM_CHARS)
            if name:
                return name
            return match.group("address").strip()
        return raw.strip(ADDRESS_TRIM_CHARS)

    @staticmethod
    def address(raw: Optional[str]) -> str:
        """Return only the bare address (``jane@example.com``)."""
        if not raw:
            return ""
        match = ANGLE_ADDRESS_RE.match(raw.strip())
        if match:
            return match.group("address").strip()
        return raw.strip(ADDRESS_TRIM_CHARS)
