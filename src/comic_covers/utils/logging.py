"""日志工具。"""

from __future__ import annotations

import logging


def setup_logging(level: int = logging.INFO) -> None:
    """初始化项目日志配置。"""

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(threadName)s] %(levelname)s %(name)s: %(message)s",
    )
    # rarfile 在回退场景下会产生大量无关调试信息
    logging.getLogger("rarfile").setLevel(max(level, logging.INFO))
