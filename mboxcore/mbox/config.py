"""
Centralised configuration for the mbox engine.

All regex patterns, default strings, and format tables live here. Tunable
sizes (chunk size, preview length, buffer sizes) come from
``mboxcore.config.Settings`` instead.
"""

from __future__ import annotations

import re
from typing import List, Tuple

# ---------------------------------------------------------------------------
# Message delimiter
# ---------------------------------------------------------------------------

DELIMITER_PREFIX = "From "
WEEKDAY_TOKENS: Tuple[str, ...] = (" Mon ", " Tue ", " Wed ", " Thu ", " Fri ", " Sat ", " Sun ")

# ---------------------------------------------------------------------------
# Header lines
# ---------------------------------------------------------------------------

# RFC 5322 field-name: printable ASCII except ":" and space
HEADER_LINE_RE = re.compile(r"^([\x21-\x39\x3b-\x7e]+)[ \t]*:[ \t]*(.*)$")
CONTINUATION_PREFIXES = (" ", "\t")

# ---------------------------------------------------------------------------
# Index entry defaults
# ---------------------------------------------------------------------------

DEFAULT_SUBJECT = "(No Subject)"
MULTIPART_MIXED = "multipart/mixed"

# Naive tag stripper applied to each preview line
PREVIEW_TAG_RE = re.compile(r"<[^>]+>")

# ---------------------------------------------------------------------------
# Address extraction
# ---------------------------------------------------------------------------

ANGLE_ADDRESS_RE = re.compile(r"^(?P<name>[^<]*)<(?P<address>[^>]*)>")
ADDRESS_TRIM_CHARS = " \t\""

# ---------------------------------------------------------------------------
# Header date patterns (tried in order after ISO-8601)
# ---------------------------------------------------------------------------

MONTH_MAP = {
    "Jan": 1, "Feb": 2, "Mar": 3, "Apr": 4, "May": 5, "Jun": 6,
    "Jul": 7, "Aug": 8, "Sep": 9, "Oct": 10, "Nov": 11, "Dec": 12,
}

_WEEKDAY = r"(?:Mon|Tue|Wed|Thu|Fri|Sat|Sun)"
_MONTH = r"(?P<month>Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)"
_TIME = r"(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})"
_NUMERIC_ZONE = r"(?P<zone>[+-]\d{4})"
_NAMED_ZONE = r"(?P<zone>(?:GMT|UTC)(?:[+-]\d{2}:?\d{2})?)"

HEADER_DATE_PATTERNS: List[Tuple["re.Pattern[str]", str]] = [
    (re.compile(rf"^{_WEEKDAY},\s+(?P<day>\d{{2}})\s+{_MONTH}\s+(?P<year>\d{{4}})\s+{_TIME}\s+{_NUMERIC_ZONE}$", re.IGNORECASE),
     "rfc2822"),
    (re.compile(rf"^{_WEEKDAY},\s+(?P<day>\d{{2}})\s+{_MONTH}\s+(?P<year>\d{{4}})\s+{_TIME}\s+{_NAMED_ZONE}$", re.IGNORECASE),
     "rfc2822_named_zone"),
    (re.compile(rf"^(?P<day>\d{{2}})\s+{_MONTH}\s+(?P<year>\d{{4}})\s+{_TIME}\s+{_NUMERIC_ZONE}$", re.IGNORECASE),
     "rfc2822_no_weekday"),
    (re.compile(rf"^{_WEEKDAY},\s+(?P<day>\d{{1,2}})\s+{_MONTH}\s+(?P<year>\d{{4}})\s+{_TIME}\s+{_NUMERIC_ZONE}$", re.IGNORECASE),
     "rfc2822_short_day"),
    (re.compile(rf"^(?P<year>\d{{4}})-(?P<month_num>\d{{2}})-(?P<day>\d{{2}})T{_TIME}(?P<zone>[+-]\d{{4}}|Z)$"),
     "iso_compact_zone"),
    (re.compile(rf"^(?P<year>\d{{4}})-(?P<month_num>\d{{2}})-(?P<day>\d{{2}}) {_TIME}$"),
     "sql_datetime"),
]

# "(PST)", "(UTC)" and similar comments trailing many Date headers
TRAILING_COMMENT_RE = re.compile(r"\s*\([^()]*\)\s*$")

# ---------------------------------------------------------------------------
# MIME
# ---------------------------------------------------------------------------

MAX_MULTIPART_DEPTH = 8
BASE64_INVALID_RE = re.compile(r"[^A-Za-z0-9+/]")
QP_ESCAPE_RE = re.compile(rb"=([0-9A-Fa-f]{2})")
QP_SOFT_BREAK_RE = re.compile(r"=\r?\n")
# Codec assumed for message text when the caller does not say how it was decoded
DEFAULT_SOURCE_ENCODING = "utf-8"

TEXT_PLAIN = "text/plain"
TEXT_HTML = "text/html"

# ---------------------------------------------------------------------------
# Attachments
# ---------------------------------------------------------------------------

DEFAULT_ATTACHMENT_NAME = "attachment"
DEFAULT_ATTACHMENT_MIME = "application/octet-stream"
NAME_PARAM_RE = re.compile(r"(?:^|[;\s])(?:file)?name\*?\s*=", re.IGNORECASE)

CONTENT_TYPE_EXTENSION_MAP = {
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": ".xlsx",
    "application/vnd.ms-excel": ".xls",
    "text/csv": ".csv",
    "application/pdf": ".pdf",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ".docx",
    "application/msword": ".doc",
    "application/zip": ".zip",
}
