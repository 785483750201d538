"""
数据模型模块 (Data Model Module)
==============================

定义扫描、解码与渲染流程中的核心数据结构：MessageIndexEntry、ScanProgress、
DecodedPart、Attachment、RenderedBody 等。

索引条目在一次扫描中创建后不可变；其余结构均按需从归档字节重新推导。
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

# 哨兵日期：Date 头缺失或无法解析时使用
SENTINEL_DATE = datetime(1, 1, 1, tzinfo=timezone.utc)

_REPLY_PREFIX_RE = re.compile(r"^(?:(?:re|fwd?)\s*:\s*)+", re.IGNORECASE)


class MessageIndexEntry(BaseModel):
    """
    邮件索引条目：一次扫描中为每封邮件生成的轻量摘要，可据此随机访问全文。

    属性:
        message_id: Message-ID 头（缺失时为生成的 UUID）
        sender: 规范化后的 From
        recipient: 规范化后的 To
        subject: 主题（缺失时为 "(No Subject)"）
        date: 带时区的发送时间；无法解析时为 SENTINEL_DATE
        body_preview: 去除标签后的正文预览
        body_offset: 邮件在归档中的起始字节偏移
        body_length: 邮件占用的字节数
        has_attachments: Content-Type 是否为 multipart/mixed
    """
    model_config = ConfigDict(frozen=True)

    message_id: str
    sender: str
    recipient: str
    subject: str
    date: datetime
    body_preview: str = ""
    body_offset: int = Field(ge=0)
    body_length: int = Field(ge=0)
    has_attachments: bool = False

    @property
    def body_span(self) -> Tuple[int, int]:
        """(offset, length)，供 BodyLoader 使用。"""
        return (self.body_offset, self.body_length)

    @property
    def has_date(self) -> bool:
        return self.date != SENTINEL_DATE

    @property
    def normalized_subject(self) -> str:
        """去掉 Re:/Fwd:/Fw: 前缀后的主题，用于会话分组。"""
        return _REPLY_PREFIX_RE.sub("", self.subject).strip()

    @property
    def sender_initials(self) -> str:
        """发件人缩写（头像用）：两个词取首字母，否则取前两个字符。"""
        parts = self.sender.split()
        if len(parts) >= 2:
            return (parts[0][:1] + parts[1][:1]).upper()
        return self.sender[:2].upper()


class ScanProgress(BaseModel):
    """
    扫描进度：已读字节数与总字节数（总数未知时为 0）。
    """
    model_config = ConfigDict(frozen=True)

    bytes_read: int = Field(ge=0)
    total_bytes: int = Field(ge=0)

    @property
    def fraction(self) -> float:
        if self.total_bytes <= 0:
            return 0.0
        return self.bytes_read / self.total_bytes


class DecodedPart(BaseModel):
    """
    单个 MIME 部件的解码结果。

    属性:
        headers: 子头部键值对，保持原始顺序，允许重复键
        payload: 按 Content-Transfer-Encoding 解码后的字节
        content_type: 小写、不含参数的 MIME 类型（默认 text/plain）
    """
    headers: List[Tuple[str, str]] = Field(default_factory=list)
    payload: bytes = b""
    content_type: str = "text/plain"

    def header(self, name: str) -> Optional[str]:
        """按名称（不区分大小写）返回第一个匹配的头部值。"""
        wanted = name.lower()
        for key, value in self.headers:
            if key.lower() == wanted:
                return value
        return None

    def has_header(self, name: str) -> bool:
        return self.header(name) is not None

    @property
    def charset(self) -> Optional[str]:
        from mboxcore.mbox.mime_decoder import MimeDecoder

        content_type = self.header("Content-Type")
        if not content_type:
            return None
        return MimeDecoder.header_param(content_type, "charset")

    def text(self) -> str:
        """按 charset → UTF-8 → Latin-1 的顺序把 payload 解码为文本。"""
        from mboxcore.mbox.content_cleaner import ContentCleaner

        return ContentCleaner.decode_payload(self.payload, self.charset)


class AttachmentKind(str, Enum):
    IMAGE = "image"
    PDF = "pdf"
    ARCHIVE = "archive"
    TEXT = "text"
    OTHER = "other"


class Attachment(BaseModel):
    """
    邮件附件。

    属性:
        filename: 文件名（无法确定时为 "attachment"）
        mime_type: MIME 类型（默认 application/octet-stream）
        size: 字节数
        data: 解码后的原始字节
    """
    filename: str
    mime_type: str = "application/octet-stream"
    size: int = Field(ge=0)
    data: bytes

    @property
    def display_size(self) -> str:
        """人类可读的大小（十进制单位，如 "1.5 KB"）。"""
        return format_byte_count(self.size)

    @property
    def kind(self) -> AttachmentKind:
        mime = self.mime_type.lower()
        if "image" in mime:
            return AttachmentKind.IMAGE
        if "pdf" in mime:
            return AttachmentKind.PDF
        if "zip" in mime:
            return AttachmentKind.ARCHIVE
        if "text" in mime:
            return AttachmentKind.TEXT
        return AttachmentKind.OTHER


class RenderSource(str, Enum):
    HTML = "html"
    PLAIN = "plain"
    FALLBACK = "fallback"


class RenderedBody(BaseModel):
    """
    可直接交给显示层的 HTML 文档。

    属性:
        markup: 完整 HTML 字符串
        source: 选用的部件类型（html / plain / fallback）
    """
    markup: str
    source: RenderSource


class BodyStatus(str, Enum):
    DECODED = "decoded"
    UNDECODABLE = "undecodable"


class BodyLoadResult(BaseModel):
    """
    按偏移量加载的邮件全文。status 为 UNDECODABLE 时 text 为 None。
    """
    status: BodyStatus
    text: Optional[str] = None
    encoding: Optional[str] = None

    @property
    def is_decoded(self) -> bool:
        return self.status == BodyStatus.DECODED


class ArchiveRecord(BaseModel):
    """
    一次归档导入的摘要记录。
    """
    name: str
    file_path: str
    size_bytes: int = 0
    imported_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    email_count: int = 0
    completed: bool = False
    cancelled: bool = False


class MessageDetail(BaseModel):
    """
    单封邮件的详情：索引条目 + 渲染后的正文 + 附件列表。
    """
    entry: MessageIndexEntry
    rendered: RenderedBody
    attachments: List[Attachment] = Field(default_factory=list)


def format_byte_count(size: int) -> str:
    """将字节数格式化为 "512 bytes" / "1.5 KB" / "2 MB" 形式。"""
    if size < 1000:
        return f"{size} byte" if size == 1 else f"{size} bytes"
    value = float(size)
    for unit in ("KB", "MB", "GB", "TB"):
        value /= 1000.0
        if value < 1000 or unit == "TB":
            text = f"{value:.1f}".rstrip("0").rstrip(".")
            return f"{text} {unit}"
    return f"{size} bytes"
