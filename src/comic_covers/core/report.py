"""错误日志写入工具。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from comic_covers.core.models import FailureRecord

LOGGER = logging.getLogger(__name__)


def format_error_log(failures: Iterable[FailureRecord]) -> str:
    """每条失败一行：``<路径>: <单行错误信息>``。"""

    return "\n".join(f"{record.path}: {record.flattened()}" for record in failures)


def write_error_log(path: Optional[Path], failures: list[FailureRecord]) -> bool:
    """整体覆盖写入错误日志。

    没有失败或未配置路径时不写入。写入失败只记录日志，不向上抛出。
    文件名中无法解码的字节（surrogateescape）按原样写回。
    返回是否成功写入。
    """

    if path is None or not failures:
        return False

    try:
        path.write_text(format_error_log(failures), encoding="utf-8", errors="surrogateescape")
    except (OSError, UnicodeError) as exc:
        LOGGER.error("写入错误日志失败 %s: %s", path, exc)
        return False
    return True
