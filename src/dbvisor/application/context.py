from __future__ import annotations

from dataclasses import dataclass

from dbvisor.application.analysis.registry import CancellationRegistry
from dbvisor.application.services.analysis_service import AnalysisService
from dbvisor.application.services.database_service import DatabaseService
from dbvisor.application.services.progress_broker import ProgressBroker
from dbvisor.application.services.project_service import ProjectService
from dbvisor.core.config import AnalysisSettings, AppPaths, load_analysis_settings
from dbvisor.infrastructure.db.repos.metadata_repo import MetadataRepo


@dataclass(slots=True)
class AppContext:
    """Process-lifetime wiring shared by the CLI and the web app."""

    paths: AppPaths
    settings: AnalysisSettings
    metadata_repo: MetadataRepo
    registry: CancellationRegistry
    broker: ProgressBroker
    databases: DatabaseService
    analysis: AnalysisService


def build_context(paths: AppPaths, settings: AnalysisSettings | None = None) -> AppContext:
    settings = settings or load_analysis_settings()
    ProjectService(paths).init_project()
    metadata_repo = MetadataRepo(paths.metadata_db_path)
    registry = CancellationRegistry()
    broker = ProgressBroker()
    return AppContext(
        paths=paths,
        settings=settings,
        metadata_repo=metadata_repo,
        registry=registry,
        broker=broker,
        databases=DatabaseService(metadata_repo, system_table_prefix=settings.system_table_prefix),
        analysis=AnalysisService(
            registry=registry,
            metadata_repo=metadata_repo,
            broker=broker,
            settings=settings,
        ),
    )
