"""输出路径计算与写入模块。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from comic_covers.core.config import JobConfig
from comic_covers.core.exceptions import CoverWriteError
from comic_covers.core.models import WorkItem

LOGGER = logging.getLogger(__name__)


def target_directory(source_root: Path, archive_path: Path, output_root: Optional[Path]) -> Path:
    """计算输出目录：在输出根目录下镜像压缩包相对于源目录的位置。

    未指定输出根目录时，输出放在压缩包所在目录。
    """

    relative_dir = archive_path.parent.relative_to(source_root)
    base = output_root if output_root is not None else source_root
    return base / relative_dir


def build_work_item(archive_path: Path, config: JobConfig) -> WorkItem:
    """根据配置生成单个压缩包的处理任务，只保留尚未存在（或强制覆盖）的输出。"""

    target_dir = target_directory(config.source_dir, archive_path, config.output_dir)
    base_name = archive_path.stem
    pending = [
        spec
        for spec in config.outputs
        if config.force_overwrite or not (target_dir / spec.filename_for(base_name)).exists()
    ]
    return WorkItem(
        source_path=archive_path,
        target_dir=target_dir,
        base_name=base_name,
        pending_outputs=pending,
    )


def ensure_directory(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise CoverWriteError(f"无法创建输出目录 {path}: {exc}") from exc


def write_output(destination: Path, data: bytes) -> None:
    """将编码后的图片写入磁盘。"""

    try:
        destination.write_bytes(data)
    except OSError as exc:
        raise CoverWriteError(f"写入文件失败 {destination}: {exc}") from exc
    LOGGER.debug("已写入 %s (%d bytes)", destination, len(data))
