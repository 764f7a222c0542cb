from __future__ import annotations

import argparse

from rich.table import Table

from dbvisor.cli.context import CLIContext


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("init", help="Create the metadata store and show where it lives")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    app = ctx.app()
    records = app.metadata_repo.list()

    table = Table(title="dbvisor store", show_header=False)
    table.add_column("Key")
    table.add_column("Value", overflow="fold")
    table.add_row("Data directory", str(ctx.paths.data_dir))
    table.add_row("Metadata database", str(ctx.paths.metadata_db_path))
    table.add_row("Registered databases", str(len(records)))
    table.add_row("Analyzed", str(sum(1 for record in records if record.analysis_results)))
    ctx.console.print(table)
    return 0
