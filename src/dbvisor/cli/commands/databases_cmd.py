from __future__ import annotations

import argparse
from pathlib import Path

from rich.table import Table

from dbvisor.cli.context import CLIContext


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    import_parser = subparsers.add_parser("import", help="Register a SQLite database file")
    import_parser.add_argument("path", type=Path)
    import_parser.add_argument("--name", help="Display name (default: file name without suffix)")
    import_parser.set_defaults(handler=run_import)

    list_parser = subparsers.add_parser("list", help="List registered databases")
    list_parser.set_defaults(handler=run_list)

    remove_parser = subparsers.add_parser("remove", help="Forget a registered database")
    remove_parser.add_argument("id", type=int)
    remove_parser.set_defaults(handler=run_remove)


def run_import(args: argparse.Namespace, ctx: CLIContext) -> int:
    app = ctx.app()
    record = app.databases.import_database(args.path, name=args.name)
    ctx.console.print(f"[green]Imported[/green] #{record.id} {record.name} ({record.path})")
    return 0


def run_list(args: argparse.Namespace, ctx: CLIContext) -> int:
    app = ctx.app()
    records = app.databases.list_databases()

    table = Table(title=f"Databases ({len(records)})")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Path", overflow="fold")
    table.add_column("Last Accessed")
    table.add_column("Analyzed")
    for record in records:
        table.add_row(
            str(record.id),
            record.name,
            record.path,
            record.last_accessed,
            "yes" if record.analysis_results else "no",
        )

    ctx.console.print(table)
    return 0


def run_remove(args: argparse.Namespace, ctx: CLIContext) -> int:
    app = ctx.app()
    app.databases.delete_database(args.id)
    ctx.console.print(f"[green]Removed[/green] database #{args.id}")
    return 0
