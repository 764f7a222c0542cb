from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from dbvisor.core.time import now_utc_timestamp
from dbvisor.domain.models.database import DatabaseRecord
from dbvisor.infrastructure.db.sqlite import get_connection

logger = logging.getLogger(__name__)


class MetadataRepo:
    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path

    def upsert(self, name: str, path: str) -> DatabaseRecord:
        now = now_utc_timestamp()
        with get_connection(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO metadata (name, path, created_at, last_accessed)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(path) DO UPDATE SET
                    name = excluded.name,
                    last_accessed = excluded.last_accessed
                """,
                (name, path, now, now),
            )
            conn.commit()
            row = conn.execute("SELECT * FROM metadata WHERE path = ?", (path,)).fetchone()
        return self._to_model(row)

    def get_by_path(self, path: str) -> DatabaseRecord | None:
        with get_connection(self.db_path) as conn:
            row = conn.execute("SELECT * FROM metadata WHERE path = ?", (path,)).fetchone()
        return self._to_model(row) if row else None

    def get_by_id(self, record_id: int) -> DatabaseRecord | None:
        with get_connection(self.db_path) as conn:
            row = conn.execute("SELECT * FROM metadata WHERE id = ?", (record_id,)).fetchone()
        return self._to_model(row) if row else None

    def list(self) -> list[DatabaseRecord]:
        with get_connection(self.db_path) as conn:
            rows = conn.execute(
                """
                SELECT * FROM metadata
                ORDER BY last_accessed DESC, id DESC
                """
            ).fetchall()
        return [self._to_model(row) for row in rows]

    def delete(self, record_id: int) -> bool:
        with get_connection(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM metadata WHERE id = ?", (record_id,))
            conn.commit()
        return int(cursor.rowcount or 0) > 0

    def touch(self, path: str) -> None:
        with get_connection(self.db_path) as conn:
            conn.execute(
                "UPDATE metadata SET last_accessed = ? WHERE path = ?",
                (now_utc_timestamp(), path),
            )
            conn.commit()

    def put_result(self, path: str, result_json: str) -> bool:
        """Overwrite the stored analysis result for ``path``.

        Returns False when the write fails or no imported database matches.
        """
        try:
            with get_connection(self.db_path) as conn:
                cursor = conn.execute(
                    "UPDATE metadata SET analysis_results = ? WHERE path = ?",
                    (result_json, path),
                )
                conn.commit()
        except sqlite3.Error as exc:
            logger.error("Failed to store analysis result for %s: %s", path, exc)
            return False
        return int(cursor.rowcount or 0) > 0

    def get_result(self, path: str) -> str | None:
        with get_connection(self.db_path) as conn:
            row = conn.execute(
                "SELECT analysis_results FROM metadata WHERE path = ?",
                (path,),
            ).fetchone()
        if row is None:
            return None
        return row["analysis_results"]

    @staticmethod
    def _to_model(row) -> DatabaseRecord:
        return DatabaseRecord(
            id=int(row["id"]),
            name=row["name"],
            path=row["path"],
            created_at=row["created_at"],
            last_accessed=row["last_accessed"],
            analysis_results=row["analysis_results"],
        )
