from __future__ import annotations

import logging
from pathlib import Path

from dbvisor.core.config import DEFAULT_SYSTEM_TABLE_PREFIX
from dbvisor.core.errors import DatabaseNotFoundError, SourceUnavailableError
from dbvisor.core.files import canonical_path, file_size_kb
from dbvisor.domain.models.analysis import AnalysisResult
from dbvisor.domain.models.database import DatabaseRecord, DbStats, TableInfo, TablePage
from dbvisor.infrastructure.db.repos.metadata_repo import MetadataRepo
from dbvisor.infrastructure.db.source import SourceDatabase

logger = logging.getLogger(__name__)


class DatabaseService:
    """Catalog of imported databases plus synchronous browsing queries."""

    def __init__(
        self,
        metadata_repo: MetadataRepo,
        *,
        system_table_prefix: str = DEFAULT_SYSTEM_TABLE_PREFIX,
    ) -> None:
        self.metadata_repo = metadata_repo
        self.system_table_prefix = system_table_prefix

    def import_database(self, path: Path | str, name: str | None = None) -> DatabaseRecord:
        resolved = canonical_path(path)
        with self._open(resolved) as source:
            source.list_tables()
        display_name = (name or "").strip() or Path(resolved).stem
        record = self.metadata_repo.upsert(display_name, resolved)
        logger.info("Imported database %s as %r", resolved, display_name)
        return record

    def list_databases(self) -> list[DatabaseRecord]:
        return self.metadata_repo.list()

    def get_database(self, path: Path | str) -> DatabaseRecord:
        resolved = canonical_path(path)
        record = self.metadata_repo.get_by_path(resolved)
        if record is None:
            raise DatabaseNotFoundError(f"Database has not been imported: {resolved}")
        return record

    def delete_database(self, record_id: int) -> None:
        if not self.metadata_repo.delete(record_id):
            raise DatabaseNotFoundError(f"No database with id {record_id}")

    def stored_result(self, path: Path | str) -> AnalysisResult | None:
        record = self.get_database(path)
        if not record.analysis_results:
            return None
        return AnalysisResult.from_json(record.analysis_results)

    def get_tables(self, path: Path | str) -> list[TableInfo]:
        with self._open(canonical_path(path)) as source:
            return [
                TableInfo(name=table, row_count=source.count_rows_or_zero(table))
                for table in source.list_tables()
            ]

    def get_table_data(
        self,
        path: Path | str,
        table: str,
        *,
        page: int = 1,
        page_size: int = 50,
        search: str | None = None,
    ) -> TablePage:
        resolved = canonical_path(path)
        with self._open(resolved) as source:
            result = source.fetch_page(table, page=page, page_size=page_size, search=search)
        self.metadata_repo.touch(resolved)
        return result

    def get_db_stats(self, path: Path | str) -> DbStats:
        resolved = canonical_path(path)
        with self._open(resolved) as source:
            tables = source.list_tables()
            total_records = sum(source.count_rows_or_zero(table) for table in tables)
        return DbStats(
            total_tables=len(tables),
            total_records=total_records,
            file_size_kb=file_size_kb(Path(resolved)),
        )

    def _open(self, path: str) -> SourceDatabase:
        try:
            return SourceDatabase.open(path, system_table_prefix=self.system_table_prefix)
        except SourceUnavailableError as exc:
            raise SourceUnavailableError(f"Invalid SQLite database: {exc}") from exc
