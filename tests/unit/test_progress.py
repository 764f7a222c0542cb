from __future__ import annotations

from dbvisor.application.analysis.progress import ProgressReporter, compute
from dbvisor.domain.models.analysis import ProgressSnapshot


def test_compute_midway() -> None:
    snapshot = compute("/tmp/a.db", processed=50, total=200, elapsed_seconds=10.0)

    assert snapshot.throughput == 5.0
    assert snapshot.eta_seconds == 30
    assert snapshot.percentage == 25.0
    assert snapshot.is_finished is False


def test_compute_finished() -> None:
    snapshot = compute("/tmp/a.db", processed=200, total=200, elapsed_seconds=4.0)

    assert snapshot.percentage == 100.0
    assert snapshot.eta_seconds == 0
    assert snapshot.is_finished is True


def test_compute_zero_elapsed_and_zero_total() -> None:
    snapshot = compute("/tmp/a.db", processed=0, total=0, elapsed_seconds=0.0)

    assert snapshot.throughput == 0.0
    assert snapshot.eta_seconds == 0
    assert snapshot.percentage == 0.0
    assert snapshot.is_finished is True


def test_compute_caps_overshoot() -> None:
    snapshot = compute("/tmp/a.db", processed=12, total=10, elapsed_seconds=1.0)

    assert snapshot.percentage == 100.0
    assert snapshot.eta_seconds == 0


def test_reporter_uses_injected_clock_and_sink() -> None:
    ticks = iter([100.0, 102.0])
    seen: list[ProgressSnapshot] = []
    reporter = ProgressReporter("/tmp/a.db", 10, seen.append, clock=lambda: next(ticks))

    snapshot = reporter.report(4)

    assert seen == [snapshot]
    assert snapshot.throughput == 2.0
    assert snapshot.eta_seconds == 3


def test_reporter_survives_failing_sink() -> None:
    def _boom(_: ProgressSnapshot) -> None:
        raise RuntimeError("listener gone")

    reporter = ProgressReporter("/tmp/a.db", 1, _boom)

    snapshot = reporter.report(1)
    assert snapshot.is_finished is True
