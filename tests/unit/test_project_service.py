from __future__ import annotations

from pathlib import Path

import pytest

from dbvisor.application.services.project_service import ProjectService
from dbvisor.core.config import load_paths
from dbvisor.infrastructure.db.sqlite import get_connection


def test_project_init_is_idempotent(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DBVISOR_HOME", raising=False)
    service = ProjectService(load_paths(tmp_path))

    assert service.is_initialized() is False
    first = service.init_project()
    second = service.init_project()

    assert service.is_initialized() is True
    assert first.paths_created == [tmp_path.resolve() / ".dbvisor"]
    assert second.paths_created == []

    with get_connection(first.metadata_db_path) as conn:
        tables = {row["name"] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
    assert "metadata" in tables
