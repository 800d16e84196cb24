import sys
from typing import Optional, TextIO

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from .metrics import RunState
from .models import PrintMode, RunReport


def format_duration(seconds: float) -> str:
    return f"{seconds:.3f}s"


def format_progress_line(success: int, failed: int, elapsed: float) -> str:
    return (
        f"Succeeded: {success}, failed: {failed}, overall: {success + failed}, "
        f"time since start: {format_duration(elapsed)}"
    )


def render_error_breakdown(report: RunReport) -> str:
    if not report.per_category:
        return ""
    items = sorted(report.per_category.items(), key=lambda kv: (-kv[1], kv[0].label))
    lines = ["Errors:"]
    for category, count in items:
        lines.append(f"{category.label}: {count}")
    return "\n".join(lines)


def render_status_breakdown(report: RunReport) -> str:
    if not report.per_status_code:
        return ""
    lines = ["HTTP err codes:"]
    for code in sorted(report.per_status_code):
        lines.append(f"code {code}: {report.per_status_code[code]}")
    return "\n".join(lines)


def render_report(report: RunReport) -> str:
    sections = []
    if report.cancelled:
        sections.append(
            f"Interrupted after {report.completed} of {report.total_requests} requests"
        )
    for block in (render_error_breakdown(report), render_status_breakdown(report)):
        if block:
            sections.append(block)
    return "\n\n".join(sections)


class ProgressPrinter:
    """Writes one progress update per outcome in the selected print mode."""

    def __init__(
        self,
        mode: PrintMode = PrintMode.INLINE,
        total: int = 0,
        stream: Optional[TextIO] = None,
    ) -> None:
        self.mode = PrintMode(mode)
        self.total = total
        self.stream = stream or sys.stdout
        self._progress: Optional[Progress] = None
        self._task_id = None

    def start(self) -> None:
        if self.mode is PrintMode.BAR:
            self._progress = Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                MofNCompleteColumn(),
                TimeElapsedColumn(),
                console=Console(file=self.stream),
            )
            self._progress.start()
            self._task_id = self._progress.add_task("[cyan]Pouring...", total=self.total)
        else:
            self.stream.write("\n")
            self.stream.flush()

    def update(self, state: RunState) -> None:
        if self._progress is not None:
            self._progress.update(
                self._task_id,
                completed=state.consumed,
                description=f"[cyan]ok {state.success_count} [red]fail {state.fail_count}",
            )
            return
        line = format_progress_line(state.success_count, state.fail_count, state.elapsed())
        if self.mode is PrintMode.INLINE:
            self.stream.write(f"\r{line}")
        else:
            self.stream.write(f"{line}\n")
        self.stream.flush()

    def stop(self) -> None:
        if self._progress is not None:
            self._progress.stop()
            self._progress = None
        elif self.mode is PrintMode.INLINE:
            self.stream.write("\n")
            self.stream.flush()

    def __enter__(self) -> "ProgressPrinter":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()

    def __call__(self, state: RunState) -> None:
        self.update(state)
