from __future__ import annotations

import logging
import time
from collections.abc import Callable

from dbvisor.domain.models.analysis import ProgressSnapshot

logger = logging.getLogger(__name__)


def compute(target: str, processed: int, total: int, elapsed_seconds: float) -> ProgressSnapshot:
    throughput = processed / elapsed_seconds if elapsed_seconds > 0 else 0.0
    remaining = max(0, total - processed)
    eta = remaining / throughput if throughput > 0 else 0.0
    percentage = (processed / total) * 100.0 if total > 0 else 0.0
    return ProgressSnapshot(
        target=target,
        percentage=min(100.0, percentage),
        processed=processed,
        total=total,
        eta_seconds=int(eta),
        throughput=throughput,
        is_finished=processed == total,
    )


class ProgressReporter:
    """Turns row counts into snapshots and hands them to a sink.

    Delivery is fire-and-forget: a failing sink never interrupts the scan.
    """

    def __init__(
        self,
        target: str,
        total: int,
        emit: Callable[[ProgressSnapshot], None] | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.target = target
        self.total = total
        self._emit = emit
        self._clock = clock
        self._started = clock()

    def elapsed(self) -> float:
        return self._clock() - self._started

    def report(self, processed: int) -> ProgressSnapshot:
        snapshot = compute(self.target, processed, self.total, self.elapsed())
        if self._emit is not None:
            try:
                self._emit(snapshot)
            except Exception:
                logger.exception("Progress delivery failed for %s", self.target)
        return snapshot
