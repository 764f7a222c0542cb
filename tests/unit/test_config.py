from __future__ import annotations

from pathlib import Path

import pytest

from dbvisor.core.config import (
    DEFAULT_PROGRESS_STRIDE,
    DEFAULT_SYSTEM_TABLE_PREFIX,
    load_analysis_settings,
    load_paths,
)
from dbvisor.core.version import version_string


def test_load_paths_defaults_under_project_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DBVISOR_HOME", raising=False)

    paths = load_paths(tmp_path)

    assert paths.data_dir == tmp_path.resolve() / ".dbvisor"
    assert paths.metadata_db_path == paths.data_dir / "metadata.db"


def test_load_paths_honours_home_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DBVISOR_HOME", str(tmp_path / "elsewhere"))

    paths = load_paths(tmp_path / "project")

    assert paths.data_dir == (tmp_path / "elsewhere").resolve()


def test_analysis_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DBVISOR_PROGRESS_STRIDE", "7")
    monkeypatch.setenv("DBVISOR_SYSTEM_TABLE_PREFIX", "_internal")

    settings = load_analysis_settings()

    assert settings.progress_stride == 7
    assert settings.system_table_prefix == "_internal"


def test_analysis_settings_ignore_invalid_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DBVISOR_PROGRESS_STRIDE", "-3")
    monkeypatch.delenv("DBVISOR_SYSTEM_TABLE_PREFIX", raising=False)

    settings = load_analysis_settings()

    assert settings.progress_stride == DEFAULT_PROGRESS_STRIDE
    assert settings.system_table_prefix == DEFAULT_SYSTEM_TABLE_PREFIX


def test_version_string() -> None:
    assert version_string() == "1.0.1"
    assert version_string(prefix=True) == "v1.0.1"
