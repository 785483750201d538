"""
归档导入模块 (Archive Import Module)
==================================

在后台扫描一个 mbox 归档，把索引条目按批交给调用方（通常是持久化层），
并在结束时返回 ArchiveRecord 摘要。支持进度回调与中途取消。

典型用法:
    importer = ArchiveImporter("inbox.mbox", on_batch=store.insert_many)
    record = importer.run()
"""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Callable, List, Optional, Union

from mboxcore.index_query import iter_batches
from mboxcore.logger import get_logger
from mboxcore.mbox.scanner import MboxScanner, ProgressCallback
from mboxcore.mbox.stream import ScanStream
from mboxcore.models import ArchiveRecord, MessageIndexEntry

logger = get_logger(__name__)

BatchCallback = Callable[[List[MessageIndexEntry]], None]


class ArchiveImporter:
    """
    批量导入器。

    参数:
        path: mbox 文件路径
        on_batch: 每批条目的回调（在调用 run() 的线程中执行）
        on_progress: 扫描进度回调（在后台扫描线程中执行）
        batch_size: 每批条目数，默认取 IMPORT_BATCH_SIZE
    """

    def __init__(
        self,
        path: Union[str, "os.PathLike[str]"],
        on_batch: BatchCallback,
        on_progress: Optional[ProgressCallback] = None,
        batch_size: Optional[int] = None,
        scanner: Optional[MboxScanner] = None,
        buffer_size: Optional[int] = None,
    ):
        self.path = Path(path)
        self.on_batch = on_batch
        self.on_progress = on_progress
        self.batch_size = batch_size
        self.scanner = scanner
        self.buffer_size = buffer_size
        self._cancel_requested = threading.Event()
        self._stream: Optional[ScanStream] = None

    @property
    def cancelled(self) -> bool:
        return self._cancel_requested.is_set()

    def run(self) -> ArchiveRecord:
        """
        执行导入。

        归档无法打开时抛出 UnreadableArchiveError。取消后已扫描的条目
        仍会作为最后一批交付，返回的记录 cancelled=True、completed=False。
        """
        stream = ScanStream(
            self.path,
            on_progress=self.on_progress,
            buffer_size=self.buffer_size,
            scanner=self.scanner,
        )
        self._stream = stream
        if self.cancelled:
            stream.cancel()

        logger.info("Import start: %s", self.path)
        count = 0
        batches = 0
        with stream:
            for batch in iter_batches(stream, self.batch_size):
                self.on_batch(batch)
                count += len(batch)
                batches += 1
                logger.debug("Imported batch %d (%d entries so far)", batches, count)

        cancelled = self.cancelled
        record = ArchiveRecord(
            name=self.path.stem,
            file_path=str(self.path),
            size_bytes=stream.total_bytes,
            email_count=count,
            completed=not cancelled,
            cancelled=cancelled,
        )
        if cancelled:
            logger.info("Import cancelled: %s (%d entries)", self.path, count)
        else:
            logger.info("Import done: %s (%d entries in %d batches)", self.path, count, batches)
        return record

    def cancel(self) -> None:
        """请求停止导入；可在任意线程调用。"""
        self._cancel_requested.set()
        if self._stream is not None:
            self._stream.cancel()
