"""命令行入口。"""

from __future__ import annotations

import locale
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from comic_covers.archive.sevenzip import check_seven_zip, find_seven_zip
from comic_covers.cli.progress import ConsoleProgressReporter, print_summary
from comic_covers.core.config import DEFAULT_OUTPUT_SPECS, JobConfig, OutputSpec
from comic_covers.core.exceptions import ComicCoverError, InvalidConfigurationError
from comic_covers.processing.pipeline import process_batch
from comic_covers.utils.logging import setup_logging

app = typer.Typer(help="为漫画压缩包（cbr/cbz/cb7/cbt/cba）批量生成封面缩略图。")

LOGGER = logging.getLogger(__name__)


def _parse_sizes(values: Optional[List[str]]) -> list[OutputSpec]:
    if not values:
        return list(DEFAULT_OUTPUT_SPECS)
    try:
        return [OutputSpec.parse(value) for value in values]
    except InvalidConfigurationError as exc:
        raise typer.BadParameter(str(exc), param_hint="--size") from exc


def _use_user_collation() -> None:
    """按用户环境设置 LC_COLLATE，封面选择的名称比较依赖它。"""

    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as exc:
        LOGGER.debug("无法应用系统排序规则，按码点比较: %s", exc)


def _report_fatal(console: Console, exc: BaseException) -> None:
    console.print("*" * 40, markup=False)
    console.print("运行出现致命错误：", markup=False)
    console.print(str(exc) or type(exc).__name__, markup=False, highlight=False, soft_wrap=True)
    console.print("*" * 40, markup=False)


@app.command("run")
def run_cli(  # noqa: PLR0913
    source: Path = typer.Argument(..., envvar="SOURCE_DIR", help="漫画压缩包所在目录（递归扫描）"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", envvar="OUTPUT_DIR", help="输出根目录，默认写在压缩包旁边"
    ),
    sizes: Optional[List[str]] = typer.Option(
        None,
        "--size",
        "-s",
        help="输出尺寸，形如 SUFFIX:WxH 或 SUFFIX:original，可重复；默认 :200x300 与 _xl:800x1200",
    ),
    force: bool = typer.Option(False, "--force/--no-force", help="强制覆盖已存在的输出"),
    error_file: Optional[Path] = typer.Option(Path("error.txt"), "--error-file", help="错误日志路径"),
    concurrency: int = typer.Option(4, "--concurrency", "-w", help="每批并发处理的压缩包数量"),
    timeout: float = typer.Option(30.0, "--timeout", help="7-Zip 单次调用的超时秒数"),
    seven_zip: Optional[str] = typer.Option(None, "--seven-zip", help="7-Zip 可执行文件路径"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出调试日志"),
) -> None:
    """扫描目录并生成封面。"""

    setup_logging(logging.DEBUG if verbose else logging.INFO)
    _use_user_collation()
    console = Console()

    job = JobConfig(
        source_dir=source.expanduser().resolve(),
        output_dir=output.expanduser().resolve() if output else None,
        outputs=_parse_sizes(sizes),
        force_overwrite=force,
        error_file=error_file,
        concurrency=concurrency,
        archive_timeout=timeout,
        seven_zip_path=seven_zip,
    )

    try:
        with ConsoleProgressReporter(console) as reporter:
            summary = process_batch(job, progress_callback=reporter)
    except ComicCoverError as exc:
        _report_fatal(console, exc)
        raise typer.Exit(code=1) from exc
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("运行过程中出现未预期的错误")
        _report_fatal(console, exc)
        raise typer.Exit(code=1) from exc

    print_summary(console, summary, display_limit=job.error_display_limit)


@app.command("check-7zip")
def check_7zip_cli(
    seven_zip: Optional[str] = typer.Option(None, "--seven-zip", help="7-Zip 可执行文件路径"),
) -> None:
    """检查 7-Zip 是否可用。"""

    try:
        executable = find_seven_zip(seven_zip)
    except ComicCoverError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    if not check_seven_zip(executable):
        typer.echo(f"7-Zip 无法执行: {executable}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"7-Zip 可用: {executable}")


if __name__ == "__main__":
    app()
