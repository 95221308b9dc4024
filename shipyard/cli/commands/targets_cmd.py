"""Targets command - show the release platform table."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from shipyard.cli.context import build_context
from shipyard.services.targets import TARGETS, artifact_filename, artifact_key

_console = Console(highlight=False)


def targets() -> None:
    """List release platforms with their artifact names and store keys."""
    ctx = build_context()
    program = ctx.project.program

    table = Table(title=f"{program} release targets")
    table.add_column("os")
    table.add_column("triple")
    table.add_column("artifact")
    table.add_column("store key")
    table.add_column("precondition")

    for target in TARGETS:
        table.add_row(
            target.os_id,
            target.triple,
            artifact_filename(program, target),
            artifact_key(program, target),
            "native deps" if target.precondition is not None else "-",
        )

    _console.print(table)
