from __future__ import annotations

import json
import queue
from dataclasses import asdict, is_dataclass
from typing import Any, Iterator

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from dbvisor.application.context import build_context
from dbvisor.core.config import AppPaths
from dbvisor.core.errors import (
    DatabaseNotFoundError,
    DbVisorError,
    TableNotFoundError,
)
from dbvisor.core.files import canonical_path
from dbvisor.core.time import now_utc_timestamp
from dbvisor.core.version import __version__, version_string
from dbvisor.domain.models.analysis import AnalysisEvent

_TERMINAL_KINDS = {"completed", "cancelled", "failed"}


class ImportDatabaseRequest(BaseModel):
    path: str
    name: str | None = None


class AnalysisRequest(BaseModel):
    path: str


def _jsonable(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    return value


def _http_error(exc: DbVisorError) -> HTTPException:
    if isinstance(exc, (DatabaseNotFoundError, TableNotFoundError)):
        return HTTPException(status_code=404, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


def _sse_event(event: str, payload: dict[str, Any]) -> str:
    return f"event: {event}\ndata: {json.dumps(payload, ensure_ascii=True)}\n\n"


def create_app(paths: AppPaths) -> FastAPI:
    app = FastAPI(title="DB Visor", version=__version__)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    ctx = build_context(paths)
    app.state.dbvisor = ctx

    def _record_payload(record) -> dict[str, Any]:
        payload = _jsonable(record)
        payload["has_analysis"] = bool(payload.pop("analysis_results", None))
        return payload

    def _require_imported(path: str) -> str:
        try:
            return ctx.databases.get_database(path).path
        except DbVisorError as exc:
            raise _http_error(exc) from exc

    @app.get("/api/version")
    def api_version() -> dict[str, Any]:
        return {"version": __version__, "display": version_string(prefix=True)}

    @app.get("/api/databases")
    def api_databases() -> dict[str, Any]:
        records = ctx.databases.list_databases()
        return {"count": len(records), "databases": [_record_payload(r) for r in records]}

    @app.post("/api/databases")
    def api_import_database(req: ImportDatabaseRequest) -> dict[str, Any]:
        try:
            record = ctx.databases.import_database(req.path, name=req.name)
        except DbVisorError as exc:
            raise _http_error(exc) from exc
        return {"ok": True, "database": _record_payload(record)}

    @app.delete("/api/databases/{record_id}")
    def api_delete_database(record_id: int) -> dict[str, Any]:
        try:
            ctx.databases.delete_database(record_id)
        except DbVisorError as exc:
            raise _http_error(exc) from exc
        return {"ok": True, "id": record_id}

    @app.get("/api/db/tables")
    def api_db_tables(path: str = Query(..., min_length=1)) -> dict[str, Any]:
        try:
            tables = ctx.databases.get_tables(path)
        except DbVisorError as exc:
            raise _http_error(exc) from exc
        return {"count": len(tables), "tables": _jsonable(tables)}

    @app.get("/api/db/table")
    def api_db_table(
        path: str = Query(..., min_length=1),
        table: str = Query(..., min_length=1),
        page: int = Query(default=1, ge=1),
        page_size: int = Query(default=50, ge=1, le=1000),
        search: str | None = Query(default=None),
    ) -> dict[str, Any]:
        try:
            result = ctx.databases.get_table_data(
                path,
                table,
                page=page,
                page_size=page_size,
                search=search,
            )
        except DbVisorError as exc:
            raise _http_error(exc) from exc
        return _jsonable(result)

    @app.get("/api/db/stats")
    def api_db_stats(path: str = Query(..., min_length=1)) -> dict[str, Any]:
        try:
            stats = ctx.databases.get_db_stats(path)
        except DbVisorError as exc:
            raise _http_error(exc) from exc
        return _jsonable(stats)

    @app.get("/api/analysis/result")
    def api_analysis_result(path: str = Query(..., min_length=1)) -> dict[str, Any]:
        try:
            result = ctx.databases.stored_result(path)
        except DbVisorError as exc:
            raise _http_error(exc) from exc
        except ValueError as exc:
            raise HTTPException(status_code=500, detail=f"Stored analysis result is unreadable: {exc}") from exc
        return {"path": canonical_path(path), "result": result.to_dict() if result else None}

    @app.get("/api/analysis/status")
    def api_analysis_status(path: str = Query(..., min_length=1)) -> dict[str, Any]:
        target = canonical_path(path)
        return {"path": target, "running": ctx.analysis.is_running(target)}

    @app.post("/api/analysis/start")
    def api_analysis_start(req: AnalysisRequest) -> dict[str, Any]:
        target = _require_imported(req.path)
        ctx.analysis.start(target)
        return {"ok": True, "path": target}

    @app.post("/api/analysis/stop")
    def api_analysis_stop(req: AnalysisRequest) -> dict[str, Any]:
        target = canonical_path(req.path)
        return {"ok": True, "path": target, "stopped": ctx.analysis.stop(target)}

    @app.post("/api/analysis/stream")
    def api_analysis_stream(req: AnalysisRequest) -> StreamingResponse:
        target = _require_imported(req.path)
        event_queue: queue.Queue[AnalysisEvent | None] = queue.Queue()

        def on_event(event: AnalysisEvent) -> None:
            if event.target != target:
                return
            event_queue.put(event)
            if event.kind in _TERMINAL_KINDS:
                event_queue.put(None)

        token = ctx.broker.subscribe(on_event)
        ctx.analysis.start(target)

        def iterator() -> Iterator[str]:
            seq = 0
            try:
                while True:
                    item = event_queue.get()
                    if item is None:
                        break
                    seq += 1
                    payload = item.to_dict()
                    payload.setdefault("emitted_at", now_utc_timestamp())
                    payload.setdefault("event_seq", seq)
                    yield _sse_event(item.kind, payload)
            finally:
                ctx.broker.unsubscribe(token)

        return StreamingResponse(
            iterator(),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",
            },
        )

    return app
