from __future__ import annotations

import logging
import sqlite3
import threading
import time
from collections.abc import Callable

from dbvisor.application.analysis.accumulator import StatisticsAccumulator
from dbvisor.application.analysis.progress import ProgressReporter
from dbvisor.core.config import DEFAULT_PROGRESS_STRIDE
from dbvisor.core.errors import AnalysisCancelledError
from dbvisor.domain.models.analysis import AnalysisResult, ProgressSnapshot
from dbvisor.infrastructure.db.source import SourceDatabase

logger = logging.getLogger(__name__)

_LOG_EVERY_ROWS = 1000


class TableScanner:
    """Walks every table, row and column of a source database once.

    Row counts are taken up front and summed into the progress denominator;
    rows inserted while the scan runs are still visited but do not move it.
    """

    def __init__(
        self,
        *,
        progress_stride: int = DEFAULT_PROGRESS_STRIDE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if progress_stride < 1:
            raise ValueError("progress_stride must be >= 1")
        self.progress_stride = progress_stride
        self._clock = clock

    def scan(
        self,
        source: SourceDatabase,
        cancel_flag: threading.Event,
        on_progress: Callable[[ProgressSnapshot], None] | None = None,
        *,
        target: str | None = None,
    ) -> AnalysisResult:
        target = target or str(source.path)
        tables = source.list_tables()
        total_rows = sum(source.count_rows_or_zero(table) for table in tables)
        reporter = ProgressReporter(target, total_rows, on_progress, clock=self._clock)
        accumulator = StatisticsAccumulator()
        logger.info("Scanning %s: %d table(s), %d row(s)", target, len(tables), total_rows)

        if total_rows == 0:
            reporter.report(0)
            return accumulator.result()

        processed = 0
        last_reported: int | None = None
        for table in tables:
            self._raise_if_cancelled(cancel_flag, target)
            try:
                columns, rows = source.iter_rows(table)
                for row in rows:
                    self._raise_if_cancelled(cancel_flag, target)
                    for column, value in zip(columns, row):
                        accumulator.observe(table, column, value)
                    processed += 1
                    if processed % self.progress_stride == 0 or processed == total_rows:
                        snapshot = reporter.report(processed)
                        last_reported = processed
                        if processed % _LOG_EVERY_ROWS == 0 or snapshot.is_finished:
                            logger.debug(
                                "Analysis progress %s: %d/%d (%.1f%%)",
                                target,
                                processed,
                                total_rows,
                                snapshot.percentage,
                            )
            except sqlite3.Error as exc:
                logger.warning("Skipping table %s in %s: %s", table, target, exc)

        # Skipped tables leave processed short of total_rows.
        if processed != last_reported:
            reporter.report(processed)
        return accumulator.result()

    @staticmethod
    def _raise_if_cancelled(cancel_flag: threading.Event, target: str) -> None:
        if cancel_flag.is_set():
            raise AnalysisCancelledError(f"Analysis cancelled for {target}")
