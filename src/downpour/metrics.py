import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field

from .models import Category, Outcome, RunReport
from .utils import now

logger = logging.getLogger(__name__)


@dataclass
class RunState:
    """Counters for one run. Only the aggregator mutates this."""

    total_requests: int
    success_count: int = 0
    fail_count: int = 0
    per_category: dict[Category, int] = field(default_factory=lambda: defaultdict(int))
    per_status_code: dict[int, int] = field(default_factory=lambda: defaultdict(int))
    started_at: float = field(default_factory=now)

    @property
    def consumed(self) -> int:
        return self.success_count + self.fail_count

    @property
    def done(self) -> bool:
        return self.consumed >= self.total_requests

    def elapsed(self) -> float:
        return now() - self.started_at

    def record(self, outcome: Outcome) -> None:
        if self.done:
            raise RuntimeError(
                f"Outcome received after all {self.total_requests} requests were counted"
            )
        if outcome.ok:
            self.success_count += 1
            return
        self.fail_count += 1
        self.per_category[outcome.category] += 1
        if outcome.category is Category.HTTP:
            self.per_status_code[outcome.status_code] += 1


# Progress callback: called by the aggregator after every outcome
ProgressCallback = Callable[[RunState], None]


def build_report(state: RunState, workers: int, cancelled: bool = False) -> RunReport:
    report = RunReport(
        total_requests=state.total_requests,
        workers=workers,
        success=state.success_count,
        failed=state.fail_count,
        per_category=dict(state.per_category),
        per_status_code=dict(state.per_status_code),
        elapsed=state.elapsed(),
        cancelled=cancelled,
    )
    logger.info(
        f"Run {'cancelled' if cancelled else 'completed'}: "
        f"{report.success} succeeded, {report.failed} failed, "
        f"{report.completed}/{report.total_requests} counted | "
        f"Error rate: {report.error_rate * 100:.1f}% | Elapsed: {report.elapsed:.3f}s"
    )
    return report
