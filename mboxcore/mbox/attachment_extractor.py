"""
Attachment detection and export.

Responsibilities:
- Decide which decoded MIME parts are attachments.
- Pick a filename (Content-Disposition before Content-Type, RFC 2231 and
  RFC 2047 forms accepted).
- Write attachment bytes to disk with safe names and SHA-256 collision
  suffixes.
"""

from __future__ import annotations

import hashlib
import mimetypes
import os
from email.utils import decode_rfc2231
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import unquote

from mboxcore.logger import get_logger
from mboxcore.mbox.config import (
    CONTENT_TYPE_EXTENSION_MAP,
    DEFAULT_ATTACHMENT_MIME,
    DEFAULT_ATTACHMENT_NAME,
    DEFAULT_SOURCE_ENCODING,
    NAME_PARAM_RE,
    TEXT_HTML,
    TEXT_PLAIN,
)
from mboxcore.mbox.headers import decode_mime_header
from mboxcore.mbox.mime_decoder import MimeDecoder
from mboxcore.models import Attachment, DecodedPart

logger = get_logger(__name__)


class AttachmentExtractor:
    """Turns decoded parts into :class:`Attachment` records."""

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    @classmethod
    def extract(cls, raw: str, source_encoding: str = DEFAULT_SOURCE_ENCODING) -> List[Attachment]:
        """Attachments of a raw message. Single-part messages have none."""
        headers, body = MimeDecoder.parse_message(raw)
        if not MimeDecoder.mime_type(headers.get("Content-Type")).startswith("multipart/"):
            return []
        return cls.from_parts(MimeDecoder.decode_entity(headers, body, source_encoding=source_encoding))

    @classmethod
    def from_parts(cls, parts: List[DecodedPart]) -> List[Attachment]:
        attachments = [cls.to_attachment(part) for part in parts if cls.is_attachment(part)]
        if attachments:
            logger.debug("Found %d attachment(s) in %d part(s)", len(attachments), len(parts))
        return attachments

    @staticmethod
    def is_attachment(part: DecodedPart) -> bool:
        """
        A part is an attachment when its disposition is ``attachment``, or
        when any header declares a (file)name and the declared type is not
        text/plain or text/html.
        """
        disposition = MimeDecoder.mime_type(part.header("Content-Disposition"))
        if disposition == "attachment":
            return True
        declares_name = any(NAME_PARAM_RE.search(value) for _, value in part.headers)
        if not declares_name:
            return False
        return MimeDecoder.mime_type(part.header("Content-Type")) not in (TEXT_PLAIN, TEXT_HTML)

    @classmethod
    def to_attachment(cls, part: DecodedPart) -> Attachment:
        mime_type = MimeDecoder.mime_type(part.header("Content-Type")) or DEFAULT_ATTACHMENT_MIME
        return Attachment(
            filename=cls.filename(part),
            mime_type=mime_type,
            size=len(part.payload),
            data=part.payload,
        )

    @classmethod
    def filename(cls, part: DecodedPart) -> str:
        """Filename from Content-Disposition, then Content-Type ``name``."""
        candidates = (
            ("Content-Disposition", "filename"),
            ("Content-Type", "name"),
        )
        for header_name, param in candidates:
            value = part.header(header_name)
            if not value:
                continue
            extended = MimeDecoder.header_param(value, f"{param}*")
            if extended:
                return cls._decode_rfc2231(extended)
            plain = MimeDecoder.header_param(value, param)
            if plain:
                return decode_mime_header(plain)
        return DEFAULT_ATTACHMENT_NAME

    @staticmethod
    def _decode_rfc2231(value: str) -> str:
        """``UTF-8''na%C3%AFve.txt`` -> ``naïve.txt``."""
        charset, _language, text = decode_rfc2231(value)
        try:
            return unquote(text, encoding=charset or "utf-8", errors="replace")
        except LookupError:
            return unquote(text, errors="replace")

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    @staticmethod
    def guess_extension(mime_type: str, filename: Optional[str] = None) -> str:
        """Lowercase extension with leading dot, or ``""`` when unknown."""
        if filename:
            ext = Path(filename).suffix.lower()
            if ext:
                return ext
        ct = (mime_type or "").lower().strip()
        if not ct:
            return ""
        if ct in CONTENT_TYPE_EXTENSION_MAP:
            return CONTENT_TYPE_EXTENSION_MAP[ct]
        guessed = mimetypes.guess_extension(ct)
        return guessed.lower() if guessed else ""

    @staticmethod
    def sanitize_filename(filename: str) -> str:
        """Drop directory parts and null bytes; reject ``.`` and ``..``."""
        if not filename:
            return ""
        name = Path(filename.replace("\\", "/")).name
        name = name.replace("\x00", "").strip()
        if name in (".", ".."):
            return ""
        return name

    @staticmethod
    def sha256_bytes(data: bytes) -> str:
        return hashlib.sha256(data).hexdigest()

    @classmethod
    def save(
        cls,
        attachment: Attachment,
        out_dir: str,
        seen_sha256_to_path: Optional[Dict[str, str]] = None,
    ) -> Path:
        """Write *attachment* into *out_dir* and return the written path.

        Identical bytes already written during the same export (tracked in
        *seen_sha256_to_path*) are not written twice. A name collision with
        different bytes gets an 8-character SHA-256 suffix.
        """
        sha256 = cls.sha256_bytes(attachment.data)
        if seen_sha256_to_path is not None:
            existing = seen_sha256_to_path.get(sha256)
            if existing and os.path.exists(existing):
                logger.debug("Attachment %s is a duplicate of %s", attachment.filename, existing)
                return Path(existing)

        os.makedirs(out_dir, exist_ok=True)
        ext = cls.guess_extension(attachment.mime_type, attachment.filename)
        safe_filename = cls.sanitize_filename(attachment.filename) or DEFAULT_ATTACHMENT_NAME
        if not Path(safe_filename).suffix and ext:
            safe_filename = f"{safe_filename}{ext}"

        target = Path(out_dir, safe_filename).resolve()
        if target.exists():
            stem = Path(safe_filename).stem
            suffix = Path(safe_filename).suffix
            target = Path(out_dir, f"{stem}.{sha256[:8]}{suffix}").resolve()

        target.write_bytes(attachment.data)
        if seen_sha256_to_path is not None:
            seen_sha256_to_path[sha256] = str(target)
        logger.info("Attachment exported: %s (%d bytes)", target.name, attachment.size)
        return target

    @classmethod
    def save_all(cls, attachments: List[Attachment], out_dir: str) -> List[Path]:
        seen: Dict[str, str] = {}
        return [cls.save(attachment, out_dir, seen) for attachment in attachments]
