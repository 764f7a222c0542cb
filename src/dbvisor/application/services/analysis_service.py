from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from pathlib import Path

from dbvisor.application.analysis.registry import CancellationRegistry
from dbvisor.application.analysis.scanner import TableScanner
from dbvisor.application.services.progress_broker import ProgressBroker
from dbvisor.core.config import AnalysisSettings
from dbvisor.core.errors import AnalysisCancelledError, PersistenceError, SourceUnavailableError
from dbvisor.domain.models.analysis import AnalysisEvent, AnalysisResult, ProgressSnapshot
from dbvisor.infrastructure.db.repos.metadata_repo import MetadataRepo
from dbvisor.infrastructure.db.source import SourceDatabase

logger = logging.getLogger(__name__)

SourceOpener = Callable[[str], SourceDatabase]


class AnalysisService:
    """Starts and stops background content analysis runs.

    ``start`` returns as soon as the worker thread is launched. Outcomes are
    observable only through the metadata store and the event broker.
    """

    def __init__(
        self,
        *,
        registry: CancellationRegistry,
        metadata_repo: MetadataRepo,
        broker: ProgressBroker | None = None,
        scanner: TableScanner | None = None,
        source_opener: SourceOpener | None = None,
        settings: AnalysisSettings | None = None,
    ) -> None:
        self.settings = settings or AnalysisSettings()
        self.registry = registry
        self.metadata_repo = metadata_repo
        self.broker = broker or ProgressBroker()
        self.scanner = scanner or TableScanner(progress_stride=self.settings.progress_stride)
        self._source_opener = source_opener or self._default_opener
        self._persist_lock = threading.Lock()
        self._workers_lock = threading.Lock()
        self._workers: list[threading.Thread] = []

    def start(self, target: str) -> None:
        flag = self.registry.register(target)
        worker = threading.Thread(
            target=self._run,
            args=(target, flag),
            daemon=True,
            name=f"analysis:{Path(target).name}",
        )
        with self._workers_lock:
            self._workers = [w for w in self._workers if w.is_alive()]
            self._workers.append(worker)
        worker.start()

    def stop(self, target: str) -> bool:
        stopped = self.registry.cancel(target)
        if stopped:
            logger.info("Stop requested for analysis of %s", target)
        return stopped

    def is_running(self, target: str) -> bool:
        return self.registry.is_active(target)

    def wait(self, timeout: float | None = None) -> bool:
        """Join every worker started so far. Returns False if any is still alive."""
        with self._workers_lock:
            workers = list(self._workers)
        deadline = None if timeout is None else time.monotonic() + timeout
        for worker in workers:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            worker.join(remaining)
        return not any(worker.is_alive() for worker in workers)

    def _run(self, target: str, flag: threading.Event) -> None:
        started = time.monotonic()
        logger.info("Starting background analysis of %s", target)
        self._publish("started", target, {})
        try:
            with self._source_opener(target) as source:
                result = self.scanner.scan(
                    source,
                    flag,
                    self._publish_progress,
                    target=target,
                )
            self._persist(target, flag, result)
        except AnalysisCancelledError as exc:
            logger.info("%s", exc)
            self._publish("cancelled", target, {"reason": str(exc)})
        except SourceUnavailableError as exc:
            logger.error("Analysis of %s failed: %s", target, exc)
            self._publish("failed", target, {"error": str(exc)})
        except PersistenceError as exc:
            logger.error("%s", exc)
            self._publish("failed", target, {"error": str(exc)})
        except Exception as exc:
            logger.exception("Analysis of %s failed unexpectedly", target)
            self._publish("failed", target, {"error": str(exc)})
        else:
            elapsed = time.monotonic() - started
            logger.info("Analysis of %s finished in %.2fs", target, elapsed)
            self._publish(
                "completed",
                target,
                {"elapsed_seconds": elapsed, "total_chars": result.total_chars},
            )
        finally:
            self.registry.unregister(target, flag)

    def _persist(self, target: str, flag: threading.Event, result: AnalysisResult) -> None:
        # A run superseded after its last row must not overwrite its successor.
        with self._persist_lock:
            if flag.is_set():
                raise AnalysisCancelledError(f"Analysis superseded for {target}")
            if not self.metadata_repo.put_result(target, result.to_json()):
                raise PersistenceError(f"Could not store analysis result for {target}")

    def _publish_progress(self, snapshot: ProgressSnapshot) -> None:
        self._publish("progress", snapshot.target, snapshot.to_dict())

    def _publish(self, kind: str, target: str, payload: dict[str, object]) -> None:
        self.broker.publish(AnalysisEvent(kind=kind, target=target, payload=payload))

    def _default_opener(self, target: str) -> SourceDatabase:
        return SourceDatabase.open(target, system_table_prefix=self.settings.system_table_prefix)
