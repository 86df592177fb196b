"""基于 7-Zip 子进程的通用读取后端。"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from comic_covers.archive.backends import PathLike
from comic_covers.core.exceptions import (
    ArchiveExtractError,
    ArchiveListError,
    ArchiveTimeoutError,
    SevenZipNotFoundError,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
CANDIDATE_EXECUTABLES = ("7zz", "7z", "7za")
PATH_PREFIX = "Path = "
FOLDER_MARKER = "Folder = +"

# l: 列表；-ba: 去掉表头；-slt: 技术格式（每条一组 key = value）；-p-: 不询问密码
LIST_ARGS = ("l", "-ba", "-slt", "-y", "-p-", "--")
# e: 解压；-so: 写到标准输出；-- 之后的参数不再按开关解析
EXTRACT_ARGS = ("e", "-y", "-p-", "-so", "--")


def find_seven_zip(preferred: Optional[str] = None) -> str:
    """定位 7-Zip 可执行文件。"""

    candidates: Iterable[str] = (preferred,) if preferred else CANDIDATE_EXECUTABLES
    for candidate in candidates:
        resolved = shutil.which(candidate)
        if resolved:
            return resolved
    if preferred:
        raise SevenZipNotFoundError(f"7-Zip 可执行文件不可用: {preferred}")
    raise SevenZipNotFoundError(f"PATH 中找不到 7-Zip（尝试了 {', '.join(CANDIDATE_EXECUTABLES)}）")


def check_seven_zip(executable: str, timeout: float = 10.0) -> bool:
    """运行一次可执行文件确认其能够启动。"""

    try:
        subprocess.run(
            [executable],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            timeout=timeout,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        LOGGER.debug("7-Zip 无法执行 %s: %s", executable, exc)
        return False
    return True


def parse_slt_listing(output: str, archive_path: str) -> list[str]:
    """解析 ``-slt`` 输出，返回文件条目名。

    以 ``Path = `` 开头的行表示一条记录；排除压缩包自身和目录
    （名称以分隔符结尾，或记录中带有 ``Folder = +``）。
    """

    entries: list[str] = []
    current: Optional[str] = None
    for line in output.split("\n"):
        if line.startswith(PATH_PREFIX) and len(line) > len(PATH_PREFIX):
            name = line[len(PATH_PREFIX):].rstrip()
            current = None
            if not name or name == archive_path:
                continue
            if name.endswith("/") or name.endswith("\\"):
                continue
            entries.append(name)
            current = name
        elif current is not None and line.rstrip() == FOLDER_MARKER:
            entries.pop()
            current = None
    return entries


def _format_failure(stderr: bytes, returncode: int) -> str:
    message = stderr.decode("utf-8", errors="replace").replace("\r", "").strip()
    return message or f"exit code {returncode}"


@dataclass(slots=True)
class SevenZipBackend:
    """通过子进程调用 7-Zip 列出和解压条目。

    每次调用都受 ``timeout`` 秒限制，超时后子进程会被强制结束。
    """

    executable: str
    timeout: float = DEFAULT_TIMEOUT

    def _run(self, args: Sequence[str]) -> subprocess.CompletedProcess:
        return subprocess.run(
            [self.executable, *args],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            timeout=self.timeout,
            check=False,
        )

    def list_entries(self, archive_path: PathLike) -> list[str]:
        path = str(archive_path)
        try:
            result = self._run([*LIST_ARGS, path])
        except subprocess.TimeoutExpired as exc:
            raise ArchiveTimeoutError(path, self.timeout) from exc
        except OSError as exc:
            raise ArchiveListError(f"7z execution failed: {exc}") from exc

        if result.returncode != 0:
            raise ArchiveListError(f"7z error: {_format_failure(result.stderr, result.returncode)}")

        output = result.stdout.decode("utf-8", errors="replace")
        return parse_slt_listing(output, path)

    def extract_entry(self, archive_path: PathLike, entry_name: str) -> bytes:
        path = str(archive_path)
        try:
            result = self._run([*EXTRACT_ARGS, path, entry_name])
        except subprocess.TimeoutExpired as exc:
            raise ArchiveTimeoutError(path, self.timeout, entry_name=entry_name) from exc
        except OSError as exc:
            raise ArchiveExtractError(f"7z extraction failed: {exc}") from exc

        if result.returncode != 0:
            raise ArchiveExtractError(
                f"7z extraction error: {_format_failure(result.stderr, result.returncode)}"
            )
        # 条目不存在时 7z 仍以 0 退出，只是没有输出
        if not result.stdout:
            raise ArchiveExtractError(f"File {entry_name} not found or extraction failed")
        return result.stdout
