"""项目内使用的自定义异常定义。"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class ComicCoverError(Exception):
    """基础异常类型。"""


class InvalidConfigurationError(ComicCoverError):
    """配置不合法时抛出。"""


class SourceDirectoryError(ComicCoverError):
    """源目录不存在或无法遍历。"""


class ArchiveError(ComicCoverError):
    """压缩包读取相关错误的基类。"""


class ArchiveListError(ArchiveError):
    """无法列出压缩包内容（损坏、格式不支持等）。"""


class ArchiveExtractError(ArchiveError):
    """条目不存在或解压失败。"""


class ArchiveTimeoutError(ArchiveError, TimeoutError):
    """7-Zip 子进程超过时间上限被强制终止。"""

    def __init__(
        self,
        archive_path: Union[str, Path],
        timeout: float,
        entry_name: Optional[str] = None,
    ) -> None:
        self.archive_path = str(archive_path)
        self.entry_name = entry_name
        self.timeout = timeout
        if entry_name is None:
            message = f"7z list timed out after {timeout:g}s for {archive_path}"
        else:
            message = f"7z extraction timed out after {timeout:g}s for {archive_path} ({entry_name})"
        super().__init__(message)


class SevenZipNotFoundError(ComicCoverError):
    """找不到可用的 7-Zip 可执行文件。"""


class ImageLoadingError(ComicCoverError):
    """封面图片无法解码。"""


class CoverWriteError(ComicCoverError):
    """输出目录或文件无法写入。"""
