from __future__ import annotations

import os
from pathlib import Path

import typer

from shipyard import __version__
from shipyard.cli.commands.build_cmd import build
from shipyard.cli.commands.gate_cmd import ci, hook_app
from shipyard.cli.commands.release_cmd import release_app
from shipyard.cli.commands.targets_cmd import targets
from shipyard.cli.commands.workflows_cmd import workflows_app
from shipyard.core.errors import ErrorCode
from shipyard.core.project import PROJECT_ENV_VAR, is_project_root


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(targets)
app.command()(build)
app.command()(ci)

# Sub-apps
app.add_typer(release_app, name="release")
app.add_typer(hook_app, name="hook")
app.add_typer(workflows_app, name="workflows")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    project: Path | None = typer.Option(
        None,
        "--project",
        help="Project root (overrides auto detection)",
    ),
) -> None:
    del version
    if project is not None:
        try:
            root = project.expanduser().resolve()
        except OSError as e:
            typer.echo(f"error: invalid --project: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        if not root.is_dir() or not is_project_root(root):
            typer.echo(
                f"error: --project '{root}' has no shipyard.toml or Cargo.toml",
                err=True,
            )
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

        os.environ[PROJECT_ENV_VAR] = str(root)


def main() -> None:
    app()
