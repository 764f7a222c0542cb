from __future__ import annotations

from dbvisor.application.services.progress_broker import ProgressBroker
from dbvisor.domain.models.analysis import AnalysisEvent


def test_publish_reaches_every_subscriber_until_unsubscribed() -> None:
    broker = ProgressBroker()
    first: list[AnalysisEvent] = []
    second: list[AnalysisEvent] = []
    token = broker.subscribe(first.append)
    broker.subscribe(second.append)

    broker.publish(AnalysisEvent(kind="started", target="/tmp/a.db"))
    broker.unsubscribe(token)
    broker.publish(AnalysisEvent(kind="completed", target="/tmp/a.db"))

    assert [e.kind for e in first] == ["started"]
    assert [e.kind for e in second] == ["started", "completed"]
    assert broker.subscriber_count() == 1


def test_failing_subscriber_does_not_block_others() -> None:
    broker = ProgressBroker()
    seen: list[AnalysisEvent] = []

    def _broken(_: AnalysisEvent) -> None:
        raise RuntimeError("closed socket")

    broker.subscribe(_broken)
    broker.subscribe(seen.append)
    broker.publish(AnalysisEvent(kind="progress", target="/tmp/a.db", payload={"processed": 1}))

    assert len(seen) == 1
    assert seen[0].to_dict() == {"kind": "progress", "target": "/tmp/a.db", "processed": 1}
