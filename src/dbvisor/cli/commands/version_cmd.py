from __future__ import annotations

import argparse

from dbvisor.cli.context import CLIContext
from dbvisor.core.version import version_string


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("version", help="Print the dbvisor version")
    parser.add_argument("--prefix", action="store_true", help="Prefix the version with 'v'")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    ctx.console.print(version_string(prefix=args.prefix))
    return 0
