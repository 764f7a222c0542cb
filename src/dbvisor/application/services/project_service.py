from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from dbvisor.core.config import AppPaths
from dbvisor.core.files import ensure_directory
from dbvisor.infrastructure.db.sqlite import initialize_schema


@dataclass(slots=True)
class InitResult:
    paths_created: list[Path]
    metadata_db_path: Path


class ProjectService:
    def __init__(self, paths: AppPaths) -> None:
        self.paths = paths

    def init_project(self) -> InitResult:
        paths_created: list[Path] = []
        if not self.paths.data_dir.exists():
            paths_created.append(self.paths.data_dir)
        ensure_directory(self.paths.data_dir)

        initialize_schema(self.paths.metadata_db_path)

        return InitResult(paths_created=paths_created, metadata_db_path=self.paths.metadata_db_path)

    def is_initialized(self) -> bool:
        return self.paths.metadata_db_path.exists()
