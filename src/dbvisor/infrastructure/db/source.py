from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from pathlib import Path

from dbvisor.core.config import DEFAULT_SYSTEM_TABLE_PREFIX
from dbvisor.core.errors import SourceUnavailableError, TableNotFoundError, ValidationError
from dbvisor.domain.models.analysis import NULL, ScalarValue, to_scalar
from dbvisor.domain.models.database import TablePage
from dbvisor.infrastructure.db.sqlite import quote_identifier

logger = logging.getLogger(__name__)


class _UndecodableText:
    pass


_UNDECODABLE = _UndecodableText()


def _lenient_text(raw: bytes) -> str | _UndecodableText:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return _UNDECODABLE


def _scalar(raw: object) -> ScalarValue:
    if raw is _UNDECODABLE:
        return NULL
    return to_scalar(raw)


def _display_value(raw: object) -> object:
    if raw is _UNDECODABLE:
        return None
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return f"<{len(raw)} bytes>"
    return raw


class SourceDatabase:
    """Read-only access to a user's SQLite file.

    Instances wrap one connection and are not shared between threads; the
    analysis worker opens its own.
    """

    def __init__(
        self,
        path: Path,
        *,
        system_table_prefix: str = DEFAULT_SYSTEM_TABLE_PREFIX,
    ) -> None:
        self.path = Path(path)
        self.system_table_prefix = system_table_prefix
        if not self.path.is_file():
            raise SourceUnavailableError(f"Database file not found: {self.path}")
        try:
            self._conn = sqlite3.connect(f"{self.path.resolve().as_uri()}?mode=ro", uri=True)
        except sqlite3.Error as exc:
            raise SourceUnavailableError(f"Cannot open database {self.path}: {exc}") from exc
        self._conn.text_factory = _lenient_text

    @classmethod
    def open(cls, path: Path | str, *, system_table_prefix: str = DEFAULT_SYSTEM_TABLE_PREFIX) -> SourceDatabase:
        return cls(Path(path), system_table_prefix=system_table_prefix)

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> SourceDatabase:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def list_tables(self) -> list[str]:
        try:
            rows = self._conn.execute(
                """
                SELECT name
                FROM sqlite_master
                WHERE type = 'table'
                """
            ).fetchall()
        except sqlite3.Error as exc:
            raise SourceUnavailableError(f"Invalid SQLite database {self.path}: {exc}") from exc
        prefix = self.system_table_prefix
        return [str(row[0]) for row in rows if not (prefix and str(row[0]).startswith(prefix))]

    def count_rows(self, table: str) -> int:
        row = self._conn.execute(f"SELECT COUNT(*) FROM {quote_identifier(table)}").fetchone()
        return int(row[0])

    def count_rows_or_zero(self, table: str) -> int:
        try:
            return self.count_rows(table)
        except sqlite3.Error as exc:
            logger.warning("Could not count rows of table %s in %s: %s", table, self.path, exc)
            return 0

    def iter_rows(self, table: str) -> tuple[list[str], Iterator[list[ScalarValue]]]:
        """Start a full scan of ``table`` in whatever order SQLite returns rows.

        Raises ``sqlite3.Error`` when the query cannot be prepared; errors while
        stepping through rows surface from the returned iterator.
        """
        cursor = self._conn.execute(f"SELECT * FROM {quote_identifier(table)}")
        columns = [str(desc[0]) for desc in cursor.description or ()]

        def rows() -> Iterator[list[ScalarValue]]:
            try:
                for raw_row in cursor:
                    yield [_scalar(value) for value in raw_row]
            finally:
                cursor.close()

        return columns, rows()

    def column_names(self, table: str) -> list[str]:
        rows = self._conn.execute(f"PRAGMA table_info({quote_identifier(table)})").fetchall()
        return [str(row[1]) for row in rows]

    def fetch_page(
        self,
        table: str,
        *,
        page: int,
        page_size: int,
        search: str | None = None,
    ) -> TablePage:
        if page < 1:
            raise ValidationError(f"Page must be >= 1, got {page}")
        if page_size < 1:
            raise ValidationError(f"Page size must be >= 1, got {page_size}")
        if table not in self.list_tables():
            raise TableNotFoundError(f"Table not found: {table}")

        columns = self.column_names(table)
        quoted = quote_identifier(table)
        where_sql = ""
        params: list[object] = []
        term = (search or "").strip()
        if term and columns:
            clauses = [f"{quote_identifier(col)} LIKE ?" for col in columns]
            where_sql = " WHERE " + " OR ".join(clauses)
            params = [f"%{term}%"] * len(columns)

        total_rows = int(self._conn.execute(f"SELECT COUNT(*) FROM {quoted}{where_sql}", params).fetchone()[0])
        total_pages = (total_rows + page_size - 1) // page_size
        offset = (page - 1) * page_size
        data_rows = self._conn.execute(
            f"SELECT * FROM {quoted}{where_sql} LIMIT ? OFFSET ?",
            [*params, page_size, offset],
        ).fetchall()

        return TablePage(
            table=table,
            columns=columns,
            rows=[[_display_value(value) for value in row] for row in data_rows],
            total_rows=total_rows,
            total_pages=total_pages,
            page=page,
            page_size=page_size,
        )
