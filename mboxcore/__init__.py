"""
mboxcore: streaming parser and decoder for mbox e-mail archives.
"""

from mboxcore.errors import (
    InvalidSpanError,
    MboxCoreError,
    ScanStreamError,
    UndecodableBodyError,
    UnreadableArchiveError,
)
from mboxcore.importer import ArchiveImporter
from mboxcore.index_query import IndexQuery, SortOrder, iter_batches
from mboxcore.mbox import (
    ArchiveHandle,
    AttachmentExtractor,
    BodyLoader,
    BodyRenderer,
    MboxScanner,
    MimeDecoder,
    ScanStream,
    scan_archive,
)
from mboxcore.message_loader import MessageLoader
from mboxcore.models import (
    ArchiveRecord,
    Attachment,
    BodyLoadResult,
    BodyStatus,
    DecodedPart,
    MessageDetail,
    MessageIndexEntry,
    RenderedBody,
    RenderSource,
    ScanProgress,
    SENTINEL_DATE,
)

__version__ = "0.1.0"

__all__ = [
    "ArchiveHandle",
    "ArchiveImporter",
    "ArchiveRecord",
    "Attachment",
    "AttachmentExtractor",
    "BodyLoadResult",
    "BodyLoader",
    "BodyRenderer",
    "BodyStatus",
    "DecodedPart",
    "IndexQuery",
    "InvalidSpanError",
    "MboxCoreError",
    "MboxScanner",
    "MessageDetail",
    "MessageIndexEntry",
    "MessageLoader",
    "MimeDecoder",
    "RenderSource",
    "RenderedBody",
    "SENTINEL_DATE",
    "ScanProgress",
    "ScanStream",
    "ScanStreamError",
    "SortOrder",
    "UndecodableBodyError",
    "UnreadableArchiveError",
    "iter_batches",
    "scan_archive",
]
