from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from dbvisor.application.services.database_service import DatabaseService
from dbvisor.core.errors import (
    DatabaseNotFoundError,
    SourceUnavailableError,
    TableNotFoundError,
    ValidationError,
)
from dbvisor.domain.models.analysis import AnalysisResult
from dbvisor.infrastructure.db.repos.metadata_repo import MetadataRepo
from dbvisor.infrastructure.db.sqlite import initialize_schema


def _service(tmp_path: Path) -> DatabaseService:
    meta_path = tmp_path / "metadata.db"
    initialize_schema(meta_path)
    return DatabaseService(MetadataRepo(meta_path))


def _make_source(path: Path) -> Path:
    conn = sqlite3.connect(path)
    conn.execute("CREATE TABLE people (id INTEGER PRIMARY KEY, name TEXT, email TEXT, photo BLOB)")
    conn.execute("CREATE TABLE tags (label TEXT)")
    conn.executemany(
        "INSERT INTO people (name, email, photo) VALUES (?, ?, ?)",
        [
            ("Ada", "ada@example.com", b"\x89PNG"),
            ("Grace", "grace@example.com", None),
            ("Linus", "linus@example.org", None),
        ],
    )
    conn.execute("INSERT INTO tags VALUES ('x')")
    conn.commit()
    conn.close()
    return path


def test_import_defaults_name_to_file_stem(tmp_path: Path) -> None:
    service = _service(tmp_path)
    source = _make_source(tmp_path / "crm.sqlite")

    record = service.import_database(source)
    named = service.import_database(source, name="Customers")

    assert record.name == "crm"
    assert named.id == record.id
    assert named.name == "Customers"
    assert record.path == str(source.resolve())
    assert [r.id for r in service.list_databases()] == [record.id]


def test_import_rejects_missing_and_invalid_files(tmp_path: Path) -> None:
    service = _service(tmp_path)
    bogus = tmp_path / "notes.txt"
    bogus.write_text("plain text", encoding="utf-8")

    with pytest.raises(SourceUnavailableError):
        service.import_database(tmp_path / "missing.db")
    with pytest.raises(SourceUnavailableError, match="Invalid SQLite database"):
        service.import_database(bogus)
    assert service.list_databases() == []


def test_delete_unknown_id_raises(tmp_path: Path) -> None:
    service = _service(tmp_path)
    record = service.import_database(_make_source(tmp_path / "crm.db"))

    service.delete_database(record.id)

    with pytest.raises(DatabaseNotFoundError):
        service.delete_database(record.id)


def test_tables_and_stats(tmp_path: Path) -> None:
    service = _service(tmp_path)
    source = _make_source(tmp_path / "crm.db")

    tables = {info.name: info.row_count for info in service.get_tables(source)}
    stats = service.get_db_stats(source)

    assert tables == {"people": 3, "tags": 1}
    assert stats.total_tables == 2
    assert stats.total_records == 4
    assert stats.file_size_kb == source.stat().st_size // 1024


def test_table_page_renders_blobs_and_paginates(tmp_path: Path) -> None:
    service = _service(tmp_path)
    source = _make_source(tmp_path / "crm.db")
    service.import_database(source)

    first = service.get_table_data(source, "people", page=1, page_size=2)
    second = service.get_table_data(source, "people", page=2, page_size=2)

    assert first.columns == ["id", "name", "email", "photo"]
    assert first.total_rows == 3
    assert first.total_pages == 2
    assert first.rows[0][3] == "<4 bytes>"
    assert first.rows[1][3] is None
    assert len(second.rows) == 1


def test_table_search_matches_any_column(tmp_path: Path) -> None:
    service = _service(tmp_path)
    source = _make_source(tmp_path / "crm.db")

    page = service.get_table_data(source, "people", search="example.com")

    assert page.total_rows == 2
    assert sorted(row[1] for row in page.rows) == ["Ada", "Grace"]


def test_table_data_validates_arguments(tmp_path: Path) -> None:
    service = _service(tmp_path)
    source = _make_source(tmp_path / "crm.db")

    with pytest.raises(TableNotFoundError):
        service.get_table_data(source, "nope")
    with pytest.raises(ValidationError):
        service.get_table_data(source, "people", page=0)
    with pytest.raises(ValidationError):
        service.get_table_data(source, "people", page_size=0)


def test_stored_result(tmp_path: Path) -> None:
    service = _service(tmp_path)
    source = _make_source(tmp_path / "crm.db")
    record = service.import_database(source)

    assert service.stored_result(source) is None
    service.metadata_repo.put_result(record.path, AnalysisResult(total_chars=7).to_json())
    assert service.stored_result(source) == AnalysisResult(total_chars=7)

    with pytest.raises(DatabaseNotFoundError):
        service.stored_result(tmp_path / "other.db")
