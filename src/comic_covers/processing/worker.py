"""单个压缩包的处理单元。"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol, Tuple

from comic_covers.archive.backends import PathLike
from comic_covers.core.models import (
    STATUS_PROCESSED,
    STATUS_SKIPPED_EXISTING,
    STATUS_SKIPPED_NO_COVER,
    ItemOutcome,
    WorkItem,
)
from comic_covers.core.output_manager import ensure_directory, write_output
from comic_covers.processing.cover_selector import choose_cover
from comic_covers.processing.thumbnail import transform as default_transform

LOGGER = logging.getLogger(__name__)

ImageTransform = Callable[[bytes, Optional[Tuple[int, int]]], bytes]


class ContentAccessor(Protocol):
    def list_entries(self, archive_path: PathLike) -> list[str]:
        ...

    def extract_to_memory(self, archive_path: PathLike, entry_name: str) -> bytes:
        ...


def process_archive(
    item: WorkItem,
    accessor: ContentAccessor,
    transform: ImageTransform = default_transform,
) -> ItemOutcome:
    """执行完整流程：列出条目 -> 选封面 -> 解压 -> 逐个尺寸生成并写入。

    所有输出都已存在时直接跳过，不读取压缩包；找不到封面也视为跳过。
    其他异常直接抛出，由编排器记录为失败。
    """

    if not item.pending_outputs:
        return ItemOutcome(source_path=item.source_path, status=STATUS_SKIPPED_EXISTING)

    entries = accessor.list_entries(item.source_path)
    cover = choose_cover(entries)
    if cover is None:
        LOGGER.debug("未找到封面：%s", item.source_path)
        return ItemOutcome(source_path=item.source_path, status=STATUS_SKIPPED_NO_COVER)

    cover_bytes = accessor.extract_to_memory(item.source_path, cover)
    ensure_directory(item.target_dir)

    for spec in item.pending_outputs:
        write_output(item.expected_path(spec), transform(cover_bytes, spec.box))

    LOGGER.debug("已生成 %s 的 %d 个输出（封面 %s）", item.source_path, len(item.pending_outputs), cover)
    return ItemOutcome(source_path=item.source_path, status=STATUS_PROCESSED)
