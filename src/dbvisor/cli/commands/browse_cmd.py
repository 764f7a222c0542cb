from __future__ import annotations

import argparse
from pathlib import Path

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from dbvisor.cli.context import CLIContext


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    tables_parser = subparsers.add_parser("tables", help="List tables and row counts")
    tables_parser.add_argument("path", type=Path)
    tables_parser.set_defaults(handler=run_tables)

    show_parser = subparsers.add_parser("show", help="Show one page of a table")
    show_parser.add_argument("path", type=Path)
    show_parser.add_argument("table")
    show_parser.add_argument("--page", type=int, default=1)
    show_parser.add_argument("--page-size", type=int, default=25)
    show_parser.add_argument("--search", help="Keep rows where any column contains this text")
    show_parser.set_defaults(handler=run_show)

    stats_parser = subparsers.add_parser("stats", help="Show database size and record totals")
    stats_parser.add_argument("path", type=Path)
    stats_parser.set_defaults(handler=run_stats)


def run_tables(args: argparse.Namespace, ctx: CLIContext) -> int:
    app = ctx.app()
    tables = app.databases.get_tables(args.path)

    out = Table(title=f"Tables ({len(tables)})")
    out.add_column("Name")
    out.add_column("Rows", justify="right")
    for info in tables:
        out.add_row(escape(info.name), str(info.row_count))
    ctx.console.print(out)
    return 0


def run_show(args: argparse.Namespace, ctx: CLIContext) -> int:
    app = ctx.app()
    page = app.databases.get_table_data(
        args.path,
        args.table,
        page=args.page,
        page_size=args.page_size,
        search=args.search,
    )

    out = Table(title=f"{escape(page.table)} (page {page.page}/{max(page.total_pages, 1)}, {page.total_rows} rows)")
    for column in page.columns:
        out.add_column(escape(column), overflow="fold")
    for row in page.rows:
        out.add_row(*("NULL" if value is None else escape(str(value)) for value in row))
    ctx.console.print(out)
    return 0


def run_stats(args: argparse.Namespace, ctx: CLIContext) -> int:
    app = ctx.app()
    stats = app.databases.get_db_stats(args.path)
    ctx.console.print(
        Panel.fit(
            f"Tables: {stats.total_tables}\n"
            f"Records: {stats.total_records}\n"
            f"File size: {stats.file_size_kb} KB",
            title="Database Stats",
        )
    )
    return 0
