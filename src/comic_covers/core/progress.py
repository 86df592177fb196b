"""运行状态与进度更新的数据模型。"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable

from comic_covers.core.models import FailureRecord, ItemOutcome


@dataclass(slots=True)
class RunState:
    """批处理运行计数器。

    只由编排器在每个批次结算后修改，进度观察者只读。
    ``processed`` 统计所有已结算的条目（包括跳过与失败）。
    """

    total: int
    processed: int = 0
    skipped: int = 0
    failures: list[FailureRecord] = field(default_factory=list)
    start_time: float = field(default_factory=time.monotonic)
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)

    @property
    def elapsed_seconds(self) -> float:
        return max(0.0, self.clock() - self.start_time)

    @property
    def estimated_remaining_seconds(self) -> float:
        """线性估算：elapsed * (total / processed) - elapsed。"""

        if self.processed <= 0:
            return 0.0
        elapsed = self.elapsed_seconds
        return max(0.0, elapsed * (self.total / self.processed) - elapsed)

    @property
    def percent(self) -> float:
        if self.total <= 0:
            return 100.0
        return self.processed / self.total * 100

    @property
    def error_count(self) -> int:
        return len(self.failures)

    def record(self, outcome: ItemOutcome) -> None:
        """结算单个条目的结果。"""

        self.processed += 1
        if outcome.failed:
            assert outcome.error is not None
            self.failures.append(FailureRecord(path=outcome.source_path, error=outcome.error))
        elif outcome.skipped:
            self.skipped += 1


@dataclass(slots=True)
class ProgressUpdate:
    """每个批次结束后发送给观察者的进度信息。"""

    state: RunState
    batch: list[ItemOutcome]
    finished: bool = False


ProgressObserver = Callable[[ProgressUpdate], None]
