from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable

from dbvisor.domain.models.analysis import AnalysisEvent

logger = logging.getLogger(__name__)

Subscriber = Callable[[AnalysisEvent], None]


class ProgressBroker:
    """In-process fan-out of analysis events to presentation subscribers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: dict[int, Subscriber] = {}
        self._tokens = itertools.count(1)

    def subscribe(self, callback: Subscriber) -> int:
        with self._lock:
            token = next(self._tokens)
            self._subscribers[token] = callback
        return token

    def unsubscribe(self, token: int) -> None:
        with self._lock:
            self._subscribers.pop(token, None)

    def publish(self, event: AnalysisEvent) -> None:
        with self._lock:
            subscribers = list(self._subscribers.values())
        for callback in subscribers:
            try:
                callback(event)
            except Exception:
                logger.exception("Event subscriber failed for %s event on %s", event.kind, event.target)

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)
