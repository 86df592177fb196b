"""核心数据模型定义。"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from comic_covers.core.config import OutputSpec

STATUS_PROCESSED = "processed"
STATUS_SKIPPED_EXISTING = "skipped-existing"
STATUS_SKIPPED_NO_COVER = "skipped-no-cover"
STATUS_FAILED = "failed"

SKIPPED_STATUSES = {STATUS_SKIPPED_EXISTING, STATUS_SKIPPED_NO_COVER}


@dataclass(slots=True)
class WorkItem:
    """单个压缩包的处理任务，分发时生成，处理完即丢弃。"""

    source_path: Path
    target_dir: Path
    base_name: str
    pending_outputs: list[OutputSpec]

    def expected_path(self, spec: OutputSpec) -> Path:
        return self.target_dir / spec.filename_for(self.base_name)


@dataclass(slots=True)
class ItemOutcome:
    """记录单个压缩包的处理结果。"""

    source_path: Path
    status: str
    error: Optional[BaseException] = None

    @property
    def skipped(self) -> bool:
        return self.status in SKIPPED_STATUSES

    @property
    def failed(self) -> bool:
        return self.status == STATUS_FAILED


@dataclass(slots=True)
class FailureRecord:
    """失败记录：压缩包路径 + 捕获的异常。"""

    path: Path
    error: BaseException

    @property
    def message(self) -> str:
        text = str(self.error).strip()
        return text or type(self.error).__name__

    @property
    def first_line(self) -> str:
        return self.message.splitlines()[0].strip() if self.message else ""

    def flattened(self) -> str:
        """单行形式，换行替换为 `` | ``。"""

        return " | ".join(self.message.replace("\r\n", "\n").split("\n"))


@dataclass(slots=True)
class RunSummary:
    """一次完整运行的汇总结果。"""

    total: int
    processed: int
    skipped: int
    failures: list[FailureRecord]
    elapsed_seconds: float
    error_file: Optional[Path] = None

    @property
    def succeeded(self) -> int:
        return self.processed - self.skipped - len(self.failures)
