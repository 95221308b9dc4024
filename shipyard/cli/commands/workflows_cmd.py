"""GitHub Actions workflow commands."""

from __future__ import annotations

import typer

from shipyard.cli.commands._helpers import exit_on_error
from shipyard.cli.context import build_context
from shipyard.core.errors import ErrorCode
from shipyard.services.workflows import install_workflows

workflows_app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="GitHub Actions workflows that call shipyard.",
)


@workflows_app.command("install")
def install(
    force: bool = typer.Option(False, "--force", help="Replace workflows not written by shipyard"),
) -> None:
    """Write .github/workflows/release.yml and ci.yml into the project."""
    ctx = build_context()
    written = exit_on_error(
        install_workflows(ctx.project.root, ctx.project.config, force=force),
        ctx,
        ErrorCode.ENV_ERROR,
    )
    for path in written:
        ctx.console.success(str(path))
