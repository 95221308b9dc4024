from __future__ import annotations

from dataclasses import dataclass

import typer

from shipyard.core.errors import ErrorCode
from shipyard.core.project import Project, detect_project
from shipyard.core.result import Err
from shipyard.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    project: Project
    console: ConsoleProtocol


def build_context() -> CLIContext:
    project_result = detect_project()
    if isinstance(project_result, Err):
        e = project_result.error
        typer.echo(f"error: {e.message}", err=True)
        if e.searched_from is not None:
            typer.echo(f"searched from: {e.searched_from}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(project=project_result.value, console=RichConsole())
