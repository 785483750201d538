"""
Minimal MIME decoder for message detail views.

Splits a raw message into headers and body, walks ``multipart/*`` bodies
(nested ones are flattened, depth-limited), and undoes
``quoted-printable`` / ``base64`` transfer encodings. Parts are returned
in document order; a multipart entity without a usable boundary yields no
parts rather than an error.

Bodies arrive as text already decoded from the archive bytes. Every
``source_encoding`` argument names the codec that decoding used, so that
identity and quoted-printable bodies turn back into the original bytes.
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import List, Optional, Tuple

from mboxcore.logger import get_logger
from mboxcore.mbox.config import (
    BASE64_INVALID_RE,
    DEFAULT_SOURCE_ENCODING,
    MAX_MULTIPART_DEPTH,
    QP_ESCAPE_RE,
    QP_SOFT_BREAK_RE,
    TEXT_PLAIN,
)
from mboxcore.mbox.headers import HeaderBlock
from mboxcore.models import DecodedPart

logger = get_logger(__name__)

_BLANK_LINE_RE = re.compile(r"\r?\n\r?\n")
_LEADING_BLANK_RE = re.compile(r"^\r?\n")
_BOUNDARY_RE = re.compile(r"boundary\s*=\s*", re.IGNORECASE)


class MimeDecoder:
    """Stateless helpers; every method is a classmethod or staticmethod."""

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    @staticmethod
    def split_message(raw: str) -> Optional[Tuple[str, str]]:
        """Split at the first blank line into ``(headers, body)``.

        Returns *None* when the text has no header/body separator at all.
        """
        leading = _LEADING_BLANK_RE.match(raw)
        if leading:
            return "", raw[leading.end():]
        match = _BLANK_LINE_RE.search(raw)
        if not match:
            return None
        return raw[:match.start()], raw[match.end():]

    @classmethod
    def parse_message(cls, raw: str) -> Tuple[HeaderBlock, str]:
        """Headers and body of a whole message; a message with no blank line is all headers."""
        split = cls.split_message(raw)
        if split is None:
            return HeaderBlock.parse(raw), ""
        header_text, body = split
        return HeaderBlock.parse(header_text), body

    @staticmethod
    def mime_type(content_type: Optional[str]) -> str:
        """``"Text/HTML; charset=utf-8"`` -> ``"text/html"``."""
        if not content_type:
            return ""
        return content_type.split(";", 1)[0].strip().lower()

    @staticmethod
    def header_param(value: str, name: str) -> Optional[str]:
        """Value of parameter *name* in a structured header, unquoted."""
        pattern = re.compile(
            rf"(?:^|;)\s*{re.escape(name)}\s*=\s*(?:\"([^\"]*)\"|'([^']*)'|([^;\s]*))",
            re.IGNORECASE,
        )
        match = pattern.search(value)
        if not match:
            return None
        for group in match.groups():
            if group is not None:
                return group.strip()
        return None

    @staticmethod
    def extract_boundary(content_type: str) -> Optional[str]:
        """Boundary parameter of a Content-Type, quoted or bare."""
        match = _BOUNDARY_RE.search(content_type)
        if not match:
            return None
        rest = content_type[match.end():].lstrip()
        if rest[:1] in ("\"", "'"):
            quote = rest[0]
            end = rest.find(quote, 1)
            boundary = rest[1:end] if end > 0 else rest[1:]
        else:
            boundary = rest.split(";", 1)[0]
        boundary = boundary.split(";", 1)[0].strip()
        return boundary or None

    @staticmethod
    def split_multipart(body: str, boundary: str) -> List[str]:
        """Body parts between ``--boundary`` delimiters; preamble and epilogue dropped."""
        pieces = body.split(f"--{boundary}")
        parts: List[str] = []
        for piece in pieces[1:]:
            if piece.startswith("--"):
                break
            newline = piece.find("\n")
            if newline < 0:
                continue
            content = piece[newline + 1:]
            if content.endswith("\r\n"):
                content = content[:-2]
            elif content.endswith("\n"):
                content = content[:-1]
            parts.append(content)
        return parts

    # ------------------------------------------------------------------
    # Transfer encodings
    # ------------------------------------------------------------------

    @staticmethod
    def to_source_bytes(text: str, source_encoding: str = DEFAULT_SOURCE_ENCODING) -> bytes:
        """Re-encode *text* with the codec it was decoded from."""
        try:
            return text.encode(source_encoding)
        except (LookupError, UnicodeEncodeError):
            logger.debug("Body not representable in %s; using UTF-8", source_encoding)
            return text.encode(DEFAULT_SOURCE_ENCODING)

    @classmethod
    def decode_quoted_printable(cls, text: str, source_encoding: str = DEFAULT_SOURCE_ENCODING) -> bytes:
        """Remove soft line breaks and turn ``=XX`` escapes into bytes."""
        data = cls.to_source_bytes(QP_SOFT_BREAK_RE.sub("", text), source_encoding)
        return QP_ESCAPE_RE.sub(lambda m: bytes([int(m.group(1), 16)]), data)

    @staticmethod
    def decode_base64(text: str) -> bytes:
        """Tolerant base64: characters outside the alphabet are ignored."""
        cleaned = BASE64_INVALID_RE.sub("", text)
        if len(cleaned) % 4 == 1:
            cleaned = cleaned[:-1]
        cleaned += "=" * (-len(cleaned) % 4)
        try:
            return base64.b64decode(cleaned)
        except (binascii.Error, ValueError) as exc:
            logger.debug("Base64 payload could not be decoded: %s", exc)
            return b""

    @classmethod
    def decode_transfer(
        cls, body: str, encoding: Optional[str], source_encoding: str = DEFAULT_SOURCE_ENCODING
    ) -> bytes:
        """Undo *encoding*; unknown or absent encodings return *body* as its source bytes."""
        name = (encoding or "").strip().lower()
        if "quoted-printable" in name:
            return cls.decode_quoted_printable(body, source_encoding)
        if "base64" in name:
            return cls.decode_base64(body)
        return cls.to_source_bytes(body, source_encoding)

    # ------------------------------------------------------------------
    # Entities
    # ------------------------------------------------------------------

    @classmethod
    def decode(cls, raw: str, source_encoding: str = DEFAULT_SOURCE_ENCODING) -> List[DecodedPart]:
        """Decode a whole message into its leaf parts.

        A single-part message yields one part holding the decoded body.
        """
        headers, body = cls.parse_message(raw)
        return cls.decode_entity(headers, body, source_encoding=source_encoding)

    @classmethod
    def decode_entity(
        cls,
        headers: HeaderBlock,
        body: str,
        depth: int = 0,
        source_encoding: str = DEFAULT_SOURCE_ENCODING,
    ) -> List[DecodedPart]:
        content_type = headers.get("Content-Type") or ""
        mime = cls.mime_type(content_type)

        if not mime.startswith("multipart/"):
            payload = cls.decode_transfer(body, headers.get("Content-Transfer-Encoding"), source_encoding)
            return [DecodedPart(headers=headers.items(), payload=payload, content_type=mime or TEXT_PLAIN)]

        if depth >= MAX_MULTIPART_DEPTH:
            logger.debug("Multipart nesting deeper than %d ignored", MAX_MULTIPART_DEPTH)
            return []
        boundary = cls.extract_boundary(content_type)
        if not boundary:
            logger.debug("Multipart entity without boundary: %r", content_type)
            return []

        parts: List[DecodedPart] = []
        for chunk in cls.split_multipart(body, boundary):
            split = cls.split_message(chunk)
            if split is None:
                continue
            sub_header_text, sub_body = split
            parts.extend(cls.decode_entity(HeaderBlock.parse(sub_header_text), sub_body, depth + 1, source_encoding))
        return parts
