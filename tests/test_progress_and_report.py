"""运行状态、进度显示与错误日志测试。"""

from __future__ import annotations

from pathlib import Path

import pytest
from rich.console import Console

from comic_covers.cli.progress import (
    ConsoleProgressReporter,
    format_duration,
    format_progress_line,
    print_summary,
    safe_text,
)
from comic_covers.core.config import JobConfig, OutputSpec
from comic_covers.core.exceptions import (
    ArchiveExtractError,
    ArchiveTimeoutError,
    InvalidConfigurationError,
)
from comic_covers.core.models import (
    STATUS_FAILED,
    STATUS_PROCESSED,
    STATUS_SKIPPED_EXISTING,
    STATUS_SKIPPED_NO_COVER,
    FailureRecord,
    ItemOutcome,
    RunSummary,
)
from comic_covers.core.progress import ProgressUpdate, RunState
from comic_covers.core.report import format_error_log, write_error_log


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_linear_eta() -> None:
    clock = FakeClock(100.0)
    state = RunState(total=10, start_time=100.0, clock=clock)
    assert state.estimated_remaining_seconds == 0.0

    state.processed = 4
    clock.now = 120.0

    # elapsed * (total / processed) - elapsed = 20 * 2.5 - 20
    assert state.elapsed_seconds == pytest.approx(20.0)
    assert state.estimated_remaining_seconds == pytest.approx(30.0)
    assert state.percent == pytest.approx(40.0)


def test_run_state_records_outcomes() -> None:
    state = RunState(total=4)
    state.record(ItemOutcome(Path("a.cbz"), STATUS_PROCESSED))
    state.record(ItemOutcome(Path("b.cbz"), STATUS_SKIPPED_EXISTING))
    state.record(ItemOutcome(Path("c.cbz"), STATUS_SKIPPED_NO_COVER))
    state.record(ItemOutcome(Path("d.cbz"), STATUS_FAILED, error=ArchiveExtractError("boom")))

    assert state.processed == 4
    assert state.skipped == 2
    assert state.error_count == 1
    assert state.failures[0].path == Path("d.cbz")


def test_format_duration() -> None:
    assert format_duration(0) == "00:00:00"
    assert format_duration(3725.9) == "01:02:05"
    assert format_duration(-5) == "00:00:00"


def test_format_progress_line() -> None:
    state = RunState(total=8, processed=2, skipped=1, start_time=0.0, clock=FakeClock(10.0))

    line = format_progress_line(state)

    assert line.startswith("[25.0%] 2/8")
    assert "00:00:10" in line
    assert "00:00:30" in line


def test_error_log_format_flattens_newlines(tmp_path: Path) -> None:
    failures = [
        FailureRecord(Path("/c/a.cbz"), ArchiveExtractError("first\r\nsecond\nthird")),
        FailureRecord(Path("/c/b.cbr"), ArchiveTimeoutError("/c/b.cbr", 30, entry_name="x.jpg")),
    ]

    assert format_error_log(failures) == (
        "/c/a.cbz: first | second | third\n"
        "/c/b.cbr: 7z extraction timed out after 30s for /c/b.cbr (x.jpg)"
    )

    target = tmp_path / "errors.txt"
    target.write_text("old content that must disappear\n" * 5, encoding="utf-8")
    assert write_error_log(target, failures) is True
    assert target.read_text(encoding="utf-8") == format_error_log(failures)


def test_error_log_skipped_without_failures_or_path(tmp_path: Path) -> None:
    target = tmp_path / "errors.txt"

    assert write_error_log(target, []) is False
    assert not target.exists()
    assert write_error_log(None, [FailureRecord(Path("a"), ValueError("x"))]) is False


def test_error_log_keeps_undecodable_filename_bytes(tmp_path: Path) -> None:
    name = b"caf\xe9.cbz".decode("utf-8", "surrogateescape")
    target = tmp_path / "errors.txt"

    assert write_error_log(target, [FailureRecord(Path("/c") / name, ValueError(f"bad {name}"))]) is True
    assert target.read_bytes() == b"/c/caf\xe9.cbz: bad caf\xe9.cbz"


def test_safe_text_replaces_unencodable_characters() -> None:
    name = b"caf\xe9.cbz".decode("utf-8", "surrogateescape")

    assert safe_text(Path("/c") / name) == "/c/caf?.cbz"
    assert safe_text("封面.cbz") == "封面.cbz"


def test_failure_message_falls_back_to_type_name() -> None:
    record = FailureRecord(Path("a.cbz"), ValueError())

    assert record.message == "ValueError"
    assert record.first_line == "ValueError"


def test_output_spec_parse() -> None:
    assert OutputSpec.parse(":200x300") == OutputSpec("", (200, 300))
    assert OutputSpec.parse("_xl:800X1200") == OutputSpec("_xl", (800, 1200))
    assert OutputSpec.parse("_o:original") == OutputSpec("_o", None)
    assert OutputSpec("_xl", (1, 1)).filename_for("book") == "book_xl.jpg"

    for bad in ("200x300", "_a:0x10", "_b:abc"):
        with pytest.raises(InvalidConfigurationError):
            OutputSpec.parse(bad)


def test_job_config_validation(tmp_path: Path) -> None:
    JobConfig(source_dir=tmp_path).validate()

    with pytest.raises(InvalidConfigurationError):
        JobConfig(source_dir=tmp_path, concurrency=0).validate()
    with pytest.raises(InvalidConfigurationError):
        JobConfig(source_dir=tmp_path, outputs=[]).validate()
    with pytest.raises(InvalidConfigurationError):
        JobConfig(source_dir=tmp_path, outputs=[OutputSpec("", None), OutputSpec("", (1, 1))]).validate()


def _console() -> Console:
    return Console(record=True, force_terminal=False, width=200)


def test_non_interactive_reporter_prints_every_ten_percent() -> None:
    console = _console()
    reporter = ConsoleProgressReporter(console)
    state = RunState(total=40)

    for _ in range(10):
        state.processed += 4
        reporter(ProgressUpdate(state=state, batch=[]))
    reporter(ProgressUpdate(state=state, batch=[], finished=True))

    lines = [line for line in console.export_text().splitlines() if line.startswith("[")]
    assert len(lines) == 10
    assert lines[-1].startswith("[100.0%] 40/40")


def test_reporter_prints_first_line_of_failures() -> None:
    console = _console()
    reporter = ConsoleProgressReporter(console)
    state = RunState(total=100)
    outcome = ItemOutcome(Path("/c/bad.cbz"), STATUS_FAILED, error=ArchiveExtractError("top line\ndetails"))
    state.record(outcome)

    reporter(ProgressUpdate(state=state, batch=[outcome]))

    text = console.export_text()
    assert "/c/bad.cbz" in text
    assert "top line" in text
    assert "details" not in text


def test_reporter_falls_back_to_error_type_for_empty_message() -> None:
    console = _console()
    reporter = ConsoleProgressReporter(console)
    state = RunState(total=1)
    outcome = ItemOutcome(Path("/c/empty.cbz"), STATUS_FAILED, error=ArchiveExtractError())
    state.record(outcome)

    reporter(ProgressUpdate(state=state, batch=[outcome]))

    assert "ArchiveExtractError" in console.export_text()


def test_summary_limits_inline_failures(tmp_path: Path) -> None:
    console = _console()
    failures = [FailureRecord(Path(f"/c/{index}.cbz"), ValueError(f"bad {index}")) for index in range(12)]
    summary = RunSummary(
        total=20,
        processed=20,
        skipped=3,
        failures=failures,
        elapsed_seconds=61,
        error_file=tmp_path / "error.txt",
    )

    print_summary(console, summary, display_limit=10)

    text = console.export_text()
    assert "失败 12 个" in text
    assert "bad 9" in text
    assert "bad 10" not in text
    assert "另有 2 个失败" in text
    assert str(tmp_path / "error.txt") in text
