from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(slots=True)
class DatabaseRecord:
    id: int
    name: str
    path: str
    created_at: str
    last_accessed: str
    analysis_results: str | None = None


@dataclass(slots=True)
class TableInfo:
    name: str
    row_count: int


@dataclass(slots=True)
class DbStats:
    total_tables: int
    total_records: int
    file_size_kb: int


@dataclass(slots=True)
class TablePage:
    table: str
    columns: list[str]
    rows: list[list[Any]]
    total_rows: int
    total_pages: int
    page: int
    page_size: int
