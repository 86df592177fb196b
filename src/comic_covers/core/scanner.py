"""压缩包扫描逻辑。"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

from comic_covers.core.exceptions import SourceDirectoryError

ARCHIVE_EXTENSIONS = {".cbr", ".cbz", ".cb7", ".cbt", ".cba"}


def is_comic_archive(path: Path) -> bool:
    return path.suffix.lower() in ARCHIVE_EXTENSIONS


def _iter_candidate_files(root: Path) -> Iterator[Path]:
    """递归遍历目录下的所有文件。"""

    for candidate in root.rglob("*"):
        if candidate.is_file():
            yield candidate


def collect_archives(source_dir: Path) -> list[Path]:
    """递归扫描源目录，返回扩展名匹配的压缩包路径。

    顺序由目录遍历决定，不做额外排序。
    """

    if not source_dir.exists():
        raise SourceDirectoryError(f"源目录不存在: {source_dir}")
    if not source_dir.is_dir():
        raise SourceDirectoryError(f"源路径不是目录: {source_dir}")

    try:
        return [path for path in _iter_candidate_files(source_dir) if is_comic_archive(path)]
    except OSError as exc:
        raise SourceDirectoryError(f"无法遍历源目录 {source_dir}: {exc}") from exc
