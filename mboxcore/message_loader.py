"""
邮件详情加载模块 (Message Detail Loader)
======================================

根据索引条目的字节区间读取单封邮件，渲染正文并提取附件。
"""

from __future__ import annotations

import os
from typing import Optional, Union

from mboxcore.errors import UndecodableBodyError
from mboxcore.logger import get_logger
from mboxcore.mbox.archive import ArchiveHandle
from mboxcore.mbox.attachment_extractor import AttachmentExtractor
from mboxcore.mbox.body_loader import BodyLoader
from mboxcore.mbox.body_renderer import BodyRenderer
from mboxcore.mbox.config import DEFAULT_SOURCE_ENCODING
from mboxcore.models import MessageDetail, MessageIndexEntry

logger = get_logger(__name__)


class MessageLoader:
    """按需生成 MessageDetail；不缓存任何结果。"""

    def __init__(self, renderer: Optional[BodyRenderer] = None):
        self.renderer = renderer or BodyRenderer()

    def load(self, handle: ArchiveHandle, entry: MessageIndexEntry) -> MessageDetail:
        """
        加载并解码一封邮件。

        异常:
            InvalidSpanError: 条目的字节区间超出归档范围
            UndecodableBodyError: 正文无法按 UTF-8 / Latin-1 解码
        """
        result = BodyLoader.load_entry(handle, entry)
        if not result.is_decoded or result.text is None:
            raise UndecodableBodyError(f"Cannot decode message {entry.message_id}")

        source_encoding = result.encoding or DEFAULT_SOURCE_ENCODING
        rendered = self.renderer.render(result.text, source_encoding)
        attachments = AttachmentExtractor.extract(result.text, source_encoding)
        logger.debug(
            "Loaded message %s (%s, %d attachment(s))", entry.message_id, rendered.source.value, len(attachments)
        )
        return MessageDetail(entry=entry, rendered=rendered, attachments=attachments)

    def load_path(self, path: Union[str, "os.PathLike[str]"], entry: MessageIndexEntry) -> MessageDetail:
        with ArchiveHandle.open(path) as handle:
            return self.load(handle, entry)
