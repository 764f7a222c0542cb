from __future__ import annotations

import argparse
import threading
from pathlib import Path

from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from dbvisor.cli.context import CLIContext
from dbvisor.core.files import canonical_path
from dbvisor.domain.models.analysis import AnalysisEvent

_TERMINAL_KINDS = {"completed", "cancelled", "failed"}


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    analyze_parser = subparsers.add_parser("analyze", help="Run a content analysis pass over a database")
    analyze_parser.add_argument("path", type=Path)
    analyze_parser.set_defaults(handler=run_analyze)

    results_parser = subparsers.add_parser("results", help="Show the stored analysis result of a database")
    results_parser.add_argument("path", type=Path)
    results_parser.add_argument("--top", type=int, default=15, help="Number of most frequent characters to list")
    results_parser.set_defaults(handler=run_results)


def run_analyze(args: argparse.Namespace, ctx: CLIContext) -> int:
    app = ctx.app()
    target = canonical_path(args.path)
    if app.metadata_repo.get_by_path(target) is None:
        app.databases.import_database(target)

    finished = threading.Event()
    outcome: dict[str, AnalysisEvent] = {}

    progress = Progress(
        SpinnerColumn(),
        TextColumn("{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total} rows"),
        TextColumn("{task.fields[rate]}"),
        TimeElapsedColumn(),
        console=ctx.console,
    )

    with progress:
        task = progress.add_task(f"Analyzing {escape(Path(target).name)}", total=None, rate="")

        def _on_event(event: AnalysisEvent) -> None:
            if event.target != target:
                return
            if event.kind == "progress":
                payload = event.payload
                progress.update(
                    task,
                    total=max(int(payload["total"]), 1),
                    completed=int(payload["processed"]),
                    rate=f"{float(payload['throughput']):.0f} rows/s, eta {int(payload['eta_seconds'])}s",
                )
            elif event.kind in _TERMINAL_KINDS:
                outcome["event"] = event
                finished.set()

        token = app.broker.subscribe(_on_event)
        try:
            app.analysis.start(target)
            try:
                while not finished.wait(0.2):
                    pass
            except KeyboardInterrupt:
                app.analysis.stop(target)
                finished.wait(10.0)
        finally:
            app.broker.unsubscribe(token)
            app.analysis.wait(timeout=10.0)

    event = outcome.get("event")
    if event is None or event.kind == "cancelled":
        ctx.console.print("[yellow]Analysis cancelled; previous results were kept.[/yellow]")
        return 1
    if event.kind == "failed":
        ctx.console.print(f"[red]Analysis failed:[/red] {escape(str(event.payload.get('error', '')))}")
        return 1

    ctx.console.print(
        f"[green]Analysis complete[/green] in {float(event.payload.get('elapsed_seconds', 0.0)):.2f}s"
    )
    return 0


def run_results(args: argparse.Namespace, ctx: CLIContext) -> int:
    app = ctx.app()
    result = app.databases.stored_result(args.path)
    if result is None:
        ctx.console.print("[yellow]No analysis result stored yet. Run 'dbvisor analyze' first.[/yellow]")
        return 1

    dist = result.type_distribution
    ctx.console.print(
        Panel.fit(
            f"Total characters: {result.total_chars}\n"
            f"Distinct characters: {len(result.char_frequency)}\n"
            f"Columns with text: {len(result.column_formats)}",
            title="Analysis Summary",
        )
    )

    types = Table(title="Type Distribution")
    types.add_column("Kind")
    types.add_column("Count", justify="right")
    for kind, count in (
        ("numeric", dist.numeric),
        ("alphabetic", dist.alphabetic),
        ("special", dist.special),
        ("unknown", dist.unknown),
    ):
        types.add_row(kind, str(count))
    ctx.console.print(types)

    chars = Table(title=f"Top {args.top} Characters")
    chars.add_column("Char")
    chars.add_column("Code Point")
    chars.add_column("Count", justify="right")
    for ch, count in result.top_characters(args.top):
        chars.add_row(escape(repr(ch)), f"U+{ord(ch):04X}", str(count))
    ctx.console.print(chars)

    detected = {key: labels for key, labels in result.column_formats.items() if labels}
    if detected:
        formats = Table(title="Detected Column Formats")
        formats.add_column("Column", overflow="fold")
        formats.add_column("Formats")
        for key, labels in sorted(detected.items()):
            formats.add_row(escape(key), ", ".join(labels))
        ctx.console.print(formats)
    return 0
