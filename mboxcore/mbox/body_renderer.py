"""
Turn a raw message into a self-contained, script-free HTML document.

Part selection:
- multipart: first ``text/html`` part, else first ``text/plain`` part
  (escaped, pre-wrapped), else the escaped raw body;
- ``text/html``: the decoded body as-is;
- anything else: the decoded body as plain text.
"""

from __future__ import annotations

from string import Template
from typing import List, Optional

from mboxcore.logger import get_logger
from mboxcore.mbox.config import DEFAULT_SOURCE_ENCODING, TEXT_HTML, TEXT_PLAIN
from mboxcore.mbox.content_cleaner import ContentCleaner
from mboxcore.mbox.mime_decoder import MimeDecoder
from mboxcore.models import DecodedPart, RenderedBody, RenderSource

logger = get_logger(__name__)

# Inline styles only; the CSP forbids scripts and remote loads.
DEFAULT_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<meta http-equiv="Content-Security-Policy" content="default-src 'none'; img-src data: cid:; style-src 'unsafe-inline'">
<meta name="viewport" content="width=device-width, initial-scale=1">
<style>
body { font-family: -apple-system, "Segoe UI", Helvetica, Arial, sans-serif; font-size: 14px; line-height: 1.5; margin: 16px; word-wrap: break-word; }
img { max-width: 100%; height: auto; }
pre { white-space: pre-wrap; font-family: inherit; margin: 0; }
</style>
</head>
<body>
${content}
</body>
</html>
"""

PLAIN_WRAPPER = "<pre>{text}</pre>"


class BodyRenderer:
    """Renders message bodies into :class:`RenderedBody` documents."""

    def __init__(self, template: str = DEFAULT_TEMPLATE) -> None:
        self.template = Template(template)

    def render(self, raw: str, source_encoding: str = DEFAULT_SOURCE_ENCODING) -> RenderedBody:
        """Render *raw*, which was decoded from the archive with *source_encoding*."""
        headers, body = MimeDecoder.parse_message(raw)
        content_type = headers.get("Content-Type") or TEXT_PLAIN
        mime = MimeDecoder.mime_type(content_type)

        if mime.startswith("multipart/"):
            return self.render_parts(MimeDecoder.decode_entity(headers, body, source_encoding=source_encoding), body)

        payload = MimeDecoder.decode_transfer(body, headers.get("Content-Transfer-Encoding"), source_encoding)
        text = ContentCleaner.decode_payload(payload, MimeDecoder.header_param(content_type, "charset"))
        if mime == TEXT_HTML:
            return self.wrap_html(text, RenderSource.HTML)
        return self.wrap_plain(text, RenderSource.PLAIN)

    def render_parts(self, parts: List[DecodedPart], raw_body: str) -> RenderedBody:
        html_part = _first_of_type(parts, TEXT_HTML)
        if html_part is not None:
            return self.wrap_html(html_part.text(), RenderSource.HTML)
        text_part = _first_of_type(parts, TEXT_PLAIN)
        if text_part is not None:
            return self.wrap_plain(text_part.text(), RenderSource.PLAIN)
        logger.debug("No text part among %d part(s); rendering raw body", len(parts))
        return self.wrap_plain(raw_body, RenderSource.FALLBACK)

    def wrap_html(self, markup: str, source: RenderSource) -> RenderedBody:
        return RenderedBody(markup=self.template.safe_substitute(content=markup), source=source)

    def wrap_plain(self, text: str, source: RenderSource) -> RenderedBody:
        content = PLAIN_WRAPPER.format(text=ContentCleaner.escape_html(text))
        return RenderedBody(markup=self.template.safe_substitute(content=content), source=source)


def _first_of_type(parts: List[DecodedPart], content_type: str) -> Optional[DecodedPart]:
    for part in parts:
        if part.content_type == content_type:
            return part
    return None
