"""压缩包内容访问：按扩展名分派后端，RAR 失败时静默回退到 7-Zip。"""

from __future__ import annotations

import logging
from typing import Callable, Optional, TypeVar

from comic_covers.archive.backends import ArchiveBackend, Backend, PathLike, select_backend
from comic_covers.archive.rar import RarBackend
from comic_covers.archive.sevenzip import DEFAULT_TIMEOUT, SevenZipBackend, find_seven_zip

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


def attempt_with_fallback(
    primary: Callable[[], T],
    fallback: Callable[[], T],
    *,
    description: str = "",
) -> T:
    """执行 ``primary``，抛出任何异常时改用 ``fallback``。

    ``fallback`` 的异常照常向上传播。
    """

    try:
        return primary()
    except Exception as exc:  # noqa: BLE001
        LOGGER.debug("首选后端失败，回退到通用后端 %s: %s", description, exc)
    return fallback()


class ArchiveAccessor:
    """列出压缩包条目并将单个条目解压到内存。"""

    def __init__(self, specialized: ArchiveBackend, generic: ArchiveBackend) -> None:
        self.specialized = specialized
        self.generic = generic

    @classmethod
    def create(cls, seven_zip_path: Optional[str] = None, timeout: float = DEFAULT_TIMEOUT) -> "ArchiveAccessor":
        """使用 rarfile + 系统中的 7-Zip 构建默认访问器。"""

        return cls(
            specialized=RarBackend(),
            generic=SevenZipBackend(executable=find_seven_zip(seven_zip_path), timeout=timeout),
        )

    def list_entries(self, archive_path: PathLike) -> list[str]:
        if select_backend(archive_path) is Backend.SPECIALIZED:
            return attempt_with_fallback(
                lambda: self.specialized.list_entries(archive_path),
                lambda: self.generic.list_entries(archive_path),
                description=str(archive_path),
            )
        return self.generic.list_entries(archive_path)

    def extract_to_memory(self, archive_path: PathLike, entry_name: str) -> bytes:
        if select_backend(archive_path) is Backend.SPECIALIZED:
            return attempt_with_fallback(
                lambda: self.specialized.extract_entry(archive_path, entry_name),
                lambda: self.generic.extract_entry(archive_path, entry_name),
                description=f"{archive_path} ({entry_name})",
            )
        return self.generic.extract_entry(archive_path, entry_name)
