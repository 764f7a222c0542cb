from __future__ import annotations

from dataclasses import dataclass, field

from rich.console import Console

from dbvisor.application.context import AppContext, build_context
from dbvisor.core.config import AppPaths


@dataclass(slots=True)
class CLIContext:
    paths: AppPaths
    console: Console
    _app: AppContext | None = field(default=None, repr=False)

    def app(self) -> AppContext:
        """Build the metadata store and services on first use."""
        if self._app is None:
            self._app = build_context(self.paths)
        return self._app
