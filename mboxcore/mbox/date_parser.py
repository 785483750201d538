"""
Date parsing for mbox ``Date`` headers.

Strategy, in order:
1. ISO-8601 (``2023-01-15T10:30:00Z``, ``2023-01-15``)
2. Explicit RFC 2822 style patterns from ``HEADER_DATE_PATTERNS``
3. ``email.utils`` tolerant RFC 2822 parsing (obsolete zone names like ``EST``)

Month names are resolved through a fixed English table, never through the
process locale, so results do not depend on ``LC_TIME``.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Optional

from mboxcore.mbox.config import HEADER_DATE_PATTERNS, MONTH_MAP, TRAILING_COMMENT_RE
from mboxcore.models import SENTINEL_DATE

_ZONE_OFFSET_RE = re.compile(r"^(?:GMT|UTC)?([+-])(\d{2}):?(\d{2})$", re.IGNORECASE)


class DateParser:
    """Stateless helper that unifies every date-parsing strategy used by
    the scanner."""

    SENTINEL = SENTINEL_DATE

    # ------------------------------------------------------------------
    # ISO-8601
    # ------------------------------------------------------------------

    @staticmethod
    def parse_iso(text: str) -> Optional[datetime]:
        """Parse an ISO-8601 date or datetime; a trailing ``Z`` means UTC."""
        if not text:
            return None
        candidate = text.strip()
        if candidate[-1:] in ("Z", "z"):
            candidate = candidate[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(candidate)
        except ValueError:
            return None
        return DateParser._as_aware(parsed)

    # ------------------------------------------------------------------
    # Email header Date
    # ------------------------------------------------------------------

    @classmethod
    def parse_header_date(cls, date_str: Optional[str]) -> Optional[datetime]:
        """Parse a *Date* header. Returns *None* if no strategy matches."""
        if not date_str:
            return None
        trimmed = date_str.strip()
        if not trimmed:
            return None

        parsed = cls.parse_iso(trimmed)
        if parsed is not None:
            return parsed

        candidate = TRAILING_COMMENT_RE.sub("", trimmed)
        for pattern, _name in HEADER_DATE_PATTERNS:
            match = pattern.match(candidate)
            if match:
                parsed = cls._from_match(match)
                if parsed is not None:
                    return parsed

        try:
            parsed = parsedate_to_datetime(candidate)
        except (TypeError, ValueError, IndexError):
            parsed = None
        if parsed is None:
            return None
        return cls._as_aware(parsed)

    @classmethod
    def parse_or_sentinel(cls, date_str: Optional[str]) -> datetime:
        parsed = cls.parse_header_date(date_str)
        return parsed if parsed is not None else cls.SENTINEL

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @classmethod
    def _from_match(cls, match: "re.Match[str]") -> Optional[datetime]:
        groups = match.groupdict()
        if groups.get("month"):
            month = MONTH_MAP.get(groups["month"].title())
        else:
            month = int(groups["month_num"])
        if month is None:
            return None
        try:
            tz = cls.parse_zone(groups.get("zone"))
            return datetime(
                int(groups["year"]),
                month,
                int(groups["day"]),
                int(groups["hour"]),
                int(groups["minute"]),
                int(groups["second"]),
                tzinfo=tz,
            )
        except ValueError:
            return None

    @staticmethod
    def parse_zone(zone: Optional[str]) -> timezone:
        """``+0530``, ``-08:00``, ``GMT+01:00``, ``Z``, ``GMT``, ``UTC`` or *None* (UTC)."""
        if not zone:
            return timezone.utc
        zone = zone.strip()
        if zone.upper() in ("Z", "GMT", "UTC", "UT"):
            return timezone.utc
        match = _ZONE_OFFSET_RE.match(zone)
        if not match:
            return timezone.utc
        sign, hours, minutes = match.groups()
        offset = timedelta(hours=int(hours), minutes=int(minutes))
        if sign == "-":
            offset = -offset
        return timezone(offset)

    @staticmethod
    def _as_aware(value: datetime) -> datetime:
        # Naive values carry no zone information; they are taken as UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
