from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_DATA_DIRNAME = ".dbvisor"
DEFAULT_PROGRESS_STRIDE = 100
DEFAULT_SYSTEM_TABLE_PREFIX = "sqlite_"


@dataclass(frozen=True)
class AppPaths:
    project_root: Path
    data_dir: Path
    metadata_db_path: Path


@dataclass(frozen=True)
class AnalysisSettings:
    progress_stride: int = DEFAULT_PROGRESS_STRIDE
    system_table_prefix: str = DEFAULT_SYSTEM_TABLE_PREFIX


def load_paths(project_root: Path | None = None) -> AppPaths:
    root = (project_root or Path.cwd()).expanduser().resolve()

    home_raw = os.getenv("DBVISOR_HOME")
    if home_raw:
        data_dir = Path(home_raw).expanduser().resolve()
    else:
        data_dir = root / DEFAULT_DATA_DIRNAME

    return AppPaths(
        project_root=root,
        data_dir=data_dir,
        metadata_db_path=data_dir / "metadata.db",
    )


def load_analysis_settings() -> AnalysisSettings:
    stride = _read_positive_int_env("DBVISOR_PROGRESS_STRIDE", DEFAULT_PROGRESS_STRIDE)
    prefix = os.getenv("DBVISOR_SYSTEM_TABLE_PREFIX") or DEFAULT_SYSTEM_TABLE_PREFIX
    return AnalysisSettings(progress_stride=stride, system_table_prefix=prefix)


def _read_positive_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default
