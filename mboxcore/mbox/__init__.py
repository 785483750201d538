"""
mbox engine subpackage.

Public API:
- ``MboxScanner``         — chunked, bounded-memory indexing of an archive
- ``ScanStream``          — the same scan on a background thread, bounded queue
- ``BodyLoader``          — random-access load of one message by byte span
- ``MimeDecoder``         — multipart splitting and transfer decoding
- ``AttachmentExtractor`` — attachment detection and export
- ``BodyRenderer``        — safe HTML document for display
- ``ArchiveHandle``       — shared seekable byte source
- ``DateParser`` / ``AddressParser`` / ``HeaderBlock`` — header normalisation
"""

from mboxcore.mbox.address_parser import AddressParser
from mboxcore.mbox.archive import ArchiveHandle
from mboxcore.mbox.attachment_extractor import AttachmentExtractor
from mboxcore.mbox.body_loader import BodyLoader
from mboxcore.mbox.body_renderer import BodyRenderer
from mboxcore.mbox.date_parser import DateParser
from mboxcore.mbox.headers import HeaderBlock, decode_mime_header
from mboxcore.mbox.mime_decoder import MimeDecoder
from mboxcore.mbox.scanner import MboxScanner, scan_archive
from mboxcore.mbox.stream import ScanStream

__all__ = [
    "AddressParser",
    "ArchiveHandle",
    "AttachmentExtractor",
    "BodyLoader",
    "BodyRenderer",
    "DateParser",
    "HeaderBlock",
    "MboxScanner",
    "MimeDecoder",
    "ScanStream",
    "decode_mime_header",
    "scan_archive",
]
