"""处理流水线：扫描、分批并发生成封面、汇总错误并报告进度。"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Iterator, Optional, Sequence

from comic_covers.archive.accessor import ArchiveAccessor
from comic_covers.core.config import JobConfig
from comic_covers.core.models import STATUS_FAILED, ItemOutcome, RunSummary
from comic_covers.core.output_manager import build_work_item
from comic_covers.core.progress import ProgressObserver, ProgressUpdate, RunState
from comic_covers.core.report import write_error_log
from comic_covers.core.scanner import collect_archives
from comic_covers.processing.thumbnail import transform as default_transform
from comic_covers.processing.worker import ContentAccessor, ImageTransform, process_archive

LOGGER = logging.getLogger(__name__)


def iter_batches(paths: Sequence[Path], size: int) -> Iterator[Sequence[Path]]:
    """按固定大小切分路径序列。"""

    for start in range(0, len(paths), size):
        yield paths[start : start + size]


def run_item(
    archive_path: Path,
    config: JobConfig,
    accessor: ContentAccessor,
    transform: ImageTransform,
) -> ItemOutcome:
    """单个压缩包的任务：计算待生成输出，然后处理。"""

    item = build_work_item(archive_path, config)
    return process_archive(item, accessor, transform)


def _settle(archive_path: Path, future: Future) -> ItemOutcome:
    try:
        return future.result()
    except Exception as exc:  # noqa: BLE001
        LOGGER.debug("处理失败 %s", archive_path, exc_info=True)
        return ItemOutcome(source_path=archive_path, status=STATUS_FAILED, error=exc)


def process_batch(
    config: JobConfig,
    progress_callback: Optional[ProgressObserver] = None,
    *,
    accessor: Optional[ContentAccessor] = None,
    transform: ImageTransform = default_transform,
) -> RunSummary:
    """批量处理入口。

    每批最多 ``config.concurrency`` 个压缩包并发处理，整批结算后才开始下一批。
    单个压缩包失败只会被记录，不会中断运行。
    """

    config.validate()

    LOGGER.info("开始扫描 %s", config.source_dir)
    archives = collect_archives(config.source_dir)
    LOGGER.info("发现 %d 个漫画压缩包", len(archives))

    if accessor is None:
        accessor = ArchiveAccessor.create(config.seven_zip_path, config.archive_timeout)

    state = RunState(total=len(archives))
    last_flush = 0

    with ThreadPoolExecutor(max_workers=config.concurrency) as executor:
        for batch in iter_batches(archives, config.concurrency):
            futures = [executor.submit(run_item, path, config, accessor, transform) for path in batch]
            wait(futures)

            outcomes = [_settle(path, future) for path, future in zip(batch, futures)]
            for outcome in outcomes:
                state.record(outcome)

            _emit_progress(progress_callback, state, outcomes)

            if state.processed >= last_flush + config.error_flush_interval:
                write_error_log(config.error_file, state.failures)
                last_flush = state.processed

    if state.failures:
        write_error_log(config.error_file, state.failures)

    _emit_progress(progress_callback, state, [], finished=True)

    LOGGER.info(
        "处理完成：共 %d 个，跳过 %d 个，失败 %d 个，耗时 %.1fs",
        state.processed,
        state.skipped,
        state.error_count,
        state.elapsed_seconds,
    )
    return RunSummary(
        total=state.total,
        processed=state.processed,
        skipped=state.skipped,
        failures=list(state.failures),
        elapsed_seconds=state.elapsed_seconds,
        error_file=config.error_file,
    )


def _emit_progress(
    callback: Optional[ProgressObserver],
    state: RunState,
    outcomes: list[ItemOutcome],
    *,
    finished: bool = False,
) -> None:
    if not callback:
        return
    try:
        callback(ProgressUpdate(state=state, batch=outcomes, finished=finished))
    except Exception as exc:  # noqa: BLE001
        LOGGER.error("进度回调异常：%s", exc)
