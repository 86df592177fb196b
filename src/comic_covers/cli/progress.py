"""命令行进度显示与结果汇总。"""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.text import Text

from comic_covers.core.models import FailureRecord, RunSummary
from comic_covers.core.progress import ProgressUpdate, RunState

NON_INTERACTIVE_STEPS = 10


def safe_text(value: object) -> str:
    """路径或错误信息中无法编码的字符（例如文件名中的非法字节）替换为 ``?``，保证可以输出到终端。"""

    return str(value).encode("utf-8", "replace").decode("utf-8")


def format_duration(seconds: float) -> str:
    """格式化为 ``HH:MM:SS``。"""

    total = max(0, int(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_progress_line(state: RunState) -> str:
    return (
        f"[{state.percent:.1f}%] {state.processed}/{state.total}"
        f" | 用时: {format_duration(state.elapsed_seconds)}"
        f" | 剩余: {format_duration(state.estimated_remaining_seconds)}"
        f" | 失败: {state.error_count}"
        f" | 跳过: {state.skipped}"
    )


class ConsoleProgressReporter:
    """作为编排器的进度观察者使用。

    交互式终端中原地刷新同一行；非交互输出只在每跨过约 10% 时打印一行。
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()
        self.interactive = self.console.is_terminal
        self._live: Optional[Live] = None
        self._last_step = 0

    def __enter__(self) -> "ConsoleProgressReporter":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._live is not None:
            self._live.stop()
            self._live = None

    def __call__(self, update: ProgressUpdate) -> None:
        for outcome in update.batch:
            if outcome.failed:
                record = FailureRecord(path=outcome.source_path, error=outcome.error)
                path, first_line = safe_text(record.path), safe_text(record.first_line)
                self._print(f"[red]处理失败[/red] {escape(path)}:\n  {escape(first_line)}")

        line = format_progress_line(update.state)
        if self.interactive:
            self._refresh(line)
            if update.finished:
                self.close()
        elif self._should_print(update):
            self.console.print(line, markup=False, highlight=False, soft_wrap=True)

    def _print(self, message: str) -> None:
        target = self._live.console if self._live is not None else self.console
        target.print(message, highlight=False, soft_wrap=True)

    def _refresh(self, line: str) -> None:
        if self._live is None:
            self._live = Live(console=self.console, auto_refresh=False, transient=False)
            self._live.start()
        self._live.update(Text(line), refresh=True)

    def _should_print(self, update: ProgressUpdate) -> bool:
        state = update.state
        if state.total <= 0:
            return False
        if update.finished:
            return False
        step = max(1, state.total // NON_INTERACTIVE_STEPS)
        current_step = state.processed // step
        if current_step > self._last_step or state.processed == state.total:
            self._last_step = current_step
            return True
        return False


def print_summary(console: Console, summary: RunSummary, display_limit: int = 10) -> None:
    """打印运行汇总，失败超过上限时提示查看错误日志。"""

    console.print(
        f"处理完成：共 {summary.total} 个，生成 {summary.succeeded} 个，"
        f"跳过 {summary.skipped} 个，失败 {len(summary.failures)} 个，"
        f"用时 {format_duration(summary.elapsed_seconds)}。",
        highlight=False,
        soft_wrap=True,
    )

    failures = summary.failures
    if not failures:
        return

    shown = failures[:display_limit]
    if len(failures) > display_limit:
        console.print(f"前 {display_limit} 个失败：", highlight=False, soft_wrap=True)
    for record in shown:
        indented = safe_text(record.message).replace("\n", "\n  ")
        console.print(
            f"- {safe_text(record.path)}:\n  {indented}", markup=False, highlight=False, soft_wrap=True
        )

    remaining = len(failures) - len(shown)
    if remaining > 0:
        location = summary.error_file if summary.error_file else "错误日志"
        console.print(
            f"... 另有 {remaining} 个失败，详见 {safe_text(location)}。",
            markup=False,
            highlight=False,
            soft_wrap=True,
        )
    elif summary.error_file:
        console.print(
            f"错误日志：{safe_text(summary.error_file)}", markup=False, highlight=False, soft_wrap=True
        )
