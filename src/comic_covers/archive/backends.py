"""压缩包读取后端的公共定义。"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Protocol, Union

PathLike = Union[str, Path]

SPECIALIZED_EXTENSIONS = {".cbr"}


class Backend(Enum):
    """可用的读取策略。"""

    SPECIALIZED = "rar"
    GENERIC = "7z"


def select_backend(archive_path: PathLike) -> Backend:
    """按扩展名选择首选后端：``.cbr`` 走 RAR 库，其余走 7-Zip。"""

    if Path(archive_path).suffix.lower() in SPECIALIZED_EXTENSIONS:
        return Backend.SPECIALIZED
    return Backend.GENERIC


class ArchiveBackend(Protocol):
    """列出条目与解压单个条目到内存的接口。"""

    def list_entries(self, archive_path: PathLike) -> list[str]:
        ...

    def extract_entry(self, archive_path: PathLike, entry_name: str) -> bytes:
        ...
