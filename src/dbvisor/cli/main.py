from __future__ import annotations

import argparse
import logging
from pathlib import Path

from rich.console import Console

from dbvisor.cli.commands import (
    analyze_cmd,
    browse_cmd,
    databases_cmd,
    init_cmd,
    version_cmd,
    web_cmd,
)
from dbvisor.cli.context import CLIContext
from dbvisor.core.config import load_paths
from dbvisor.core.errors import DbVisorError
from dbvisor.core.logging import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dbvisor",
        description="Browse SQLite databases and analyze their content",
    )
    parser.add_argument(
        "--project-root",
        type=Path,
        default=Path.cwd(),
        help="Project root to use for .dbvisor data (default: current working directory)",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0)

    subparsers = parser.add_subparsers(dest="command", required=True)
    init_cmd.register(subparsers)
    databases_cmd.register(subparsers)
    browse_cmd.register(subparsers)
    analyze_cmd.register(subparsers)
    web_cmd.register(subparsers)
    version_cmd.register(subparsers)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    console = Console()

    paths = load_paths(args.project_root)
    ctx = CLIContext(paths=paths, console=console)

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 2

    try:
        return handler(args, ctx)
    except DbVisorError as exc:
        logger.error(str(exc))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
