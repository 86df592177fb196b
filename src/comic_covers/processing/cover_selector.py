"""封面选择启发式。"""

from __future__ import annotations

import locale
from typing import Iterable, Optional

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp")
COVER_MARKER = "cover."


def is_image_entry(name: str) -> bool:
    return name.lower().endswith(IMAGE_EXTENSIONS)


def _separator_count(name: str) -> int:
    return name.count("/") + name.count("\\")


def _sort_key(name: str) -> tuple[bool, int, str, str]:
    lowered = name.lower()
    return (
        COVER_MARKER not in lowered,
        _separator_count(name),
        locale.strxfrm(lowered),
        name,
    )


def choose_cover(entries: Iterable[str]) -> Optional[str]:
    """从条目名中选出封面，没有图片条目时返回 ``None``。

    排序规则（升序取第一个）：

    1. 文件名包含 ``cover.`` 的优先；
    2. 路径分隔符（``/`` 或 ``\\``）越少越优先；
    3. 按当前 ``LC_COLLATE`` 比较小写名称（命令行入口会启用用户环境的排序规则）；
       最后按原始名称保证全序。
    """

    candidates = [name for name in entries if is_image_entry(name)]
    if not candidates:
        return None
    return min(candidates, key=_sort_key)
