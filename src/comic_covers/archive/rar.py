"""基于 rarfile 的进程内 RAR 读取后端。"""

from __future__ import annotations

import io
import logging
from pathlib import Path

import rarfile

from comic_covers.archive.backends import PathLike
from comic_covers.core.exceptions import ArchiveExtractError, ArchiveListError

LOGGER = logging.getLogger(__name__)


def _needs_external_tool(info: rarfile.RarInfo) -> bool:
    """压缩或加密的条目会让 rarfile 启动外部解压程序，而该调用没有超时限制。"""

    return info.compress_type != rarfile.RAR_M0 or info.needs_password()


class RarBackend:
    """将整个文件读入内存后交给 rarfile 解析。

    只处理能在进程内直接读取的条目（仅存储、未加密）；
    其他条目抛出 ``ArchiveExtractError``，由访问器回退到有超时控制的 7-Zip。
    """

    def _open(self, archive_path: PathLike) -> rarfile.RarFile:
        data = Path(archive_path).read_bytes()
        return rarfile.RarFile(io.BytesIO(data))

    def list_entries(self, archive_path: PathLike) -> list[str]:
        try:
            with self._open(archive_path) as archive:
                return [info.filename for info in archive.infolist() if not info.is_dir()]
        except (rarfile.Error, OSError) as exc:
            raise ArchiveListError(f"RAR 列表失败 {archive_path}: {exc}") from exc

    def extract_entry(self, archive_path: PathLike, entry_name: str) -> bytes:
        try:
            with self._open(archive_path) as archive:
                try:
                    info = archive.getinfo(entry_name)
                except rarfile.NoRarEntry as exc:
                    raise ArchiveExtractError(f"File {entry_name} not found or extraction failed") from exc
                if _needs_external_tool(info):
                    raise ArchiveExtractError(f"RAR 条目需要外部解压程序 {archive_path} ({entry_name})")
                data = archive.read(entry_name)
        except (rarfile.Error, OSError) as exc:
            raise ArchiveExtractError(f"RAR 解压失败 {archive_path} ({entry_name}): {exc}") from exc

        LOGGER.debug("RAR 解压 %s -> %s (%d bytes)", archive_path, entry_name, len(data))
        return data
