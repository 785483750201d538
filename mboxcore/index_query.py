"""
索引查询模块 (Index Query Module)
================================

对扫描得到的 MessageIndexEntry 列表进行搜索、过滤、排序与分批。

主要功能:
- IndexQuery: 按关键词（主题 / 发件人 / 收件人 / 预览）搜索，按是否含附件过滤，
  并按 SortOrder 排序
- iter_batches: 把惰性条目流切分为固定大小的批次，交给持久化层
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from mboxcore.config import get_settings
from mboxcore.models import MessageIndexEntry


class SortOrder(str, Enum):
    DATE_DESC = "date_desc"
    DATE_ASC = "date_asc"
    SENDER_AZ = "sender_az"
    SUBJECT_AZ = "subject_az"


_SORT_KEYS: Dict[SortOrder, Tuple[Callable[[MessageIndexEntry], object], bool]] = {
    SortOrder.DATE_DESC: (lambda e: e.date, True),
    SortOrder.DATE_ASC: (lambda e: e.date, False),
    SortOrder.SENDER_AZ: (lambda e: e.sender.casefold(), False),
    SortOrder.SUBJECT_AZ: (lambda e: e.subject.casefold(), False),
}


class IndexQuery:
    """
    邮件列表查询条件。

    属性:
        search_text: 关键词，空字符串表示不过滤（大小写不敏感）
        attachments_only: 为 True 时只保留 has_attachments 的条目
        sort_order: 排序方式，默认按日期降序
    """

    def __init__(
        self,
        search_text: str = "",
        attachments_only: bool = False,
        sort_order: SortOrder = SortOrder.DATE_DESC,
    ):
        self.search_text = search_text
        self.attachments_only = attachments_only
        self.sort_order = SortOrder(sort_order)

    def matches(self, entry: MessageIndexEntry) -> bool:
        if self.attachments_only and not entry.has_attachments:
            return False
        needle = self.search_text.strip().casefold()
        if not needle:
            return True
        haystacks = (entry.subject, entry.sender, entry.recipient, entry.body_preview)
        return any(needle in text.casefold() for text in haystacks)

    def apply(self, entries: Iterable[MessageIndexEntry]) -> List[MessageIndexEntry]:
        """过滤后排序；同键条目保持原有（文件）顺序。"""
        key, reverse = _SORT_KEYS[self.sort_order]
        return sorted((e for e in entries if self.matches(e)), key=key, reverse=reverse)


def iter_batches(
    entries: Iterable[MessageIndexEntry],
    size: Optional[int] = None,
) -> Iterator[List[MessageIndexEntry]]:
    """
    将条目流按 size 条一批输出，最后一批可能不足 size。

    size 未指定时使用配置中的 IMPORT_BATCH_SIZE（默认 50）。
    """
    batch_size = size or get_settings().IMPORT_BATCH_SIZE
    if batch_size <= 0:
        raise ValueError(f"batch size must be positive, got {batch_size}")
    batch: List[MessageIndexEntry] = []
    for entry in entries:
        batch.append(entry)
        if len(batch) >= batch_size:
            yield batch
            batch = []
    if batch:
        yield batch
