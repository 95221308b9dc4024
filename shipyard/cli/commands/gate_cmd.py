"""Quality gate commands - CI job and local git hooks."""

from __future__ import annotations

import typer

from shipyard.cli.commands._helpers import exit_on_error
from shipyard.cli.context import CLIContext, build_context
from shipyard.core.errors import ErrorCode
from shipyard.core.result import Err
from shipyard.output.console import Style
from shipyard.platform.detection import is_linux
from shipyard.services.gates import (
    PRE_COMMIT_STAGES,
    PRE_PUSH_STAGES,
    GateStage,
    ci_stages,
    run_gate,
)
from shipyard.services.hooks import install_hooks, resolve_hooks_dir

hook_app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Local quality gates run by git hooks.",
)


def _run(ctx: CLIContext, gate: str, stages: tuple[GateStage, ...]) -> None:
    result = run_gate(gate, stages, cwd=ctx.project.root, console=ctx.console)
    if isinstance(result, Err):
        ctx.console.error(str(result.error))
        if result.error.detail:
            ctx.console.print(result.error.detail, Style.DIM)
        raise typer.Exit(code=int(ErrorCode.BUILD_ERROR))


def ci(
    native_deps: bool = typer.Option(
        True, "--native-deps/--no-native-deps", help="Install Linux native packages first"
    ),
) -> None:
    """Run tests, clippy and the format check; fail on the first non-zero exit."""
    ctx = build_context()
    stages = ci_stages(ctx.project.config.build, linux_host=is_linux() and native_deps)
    _run(ctx, "ci", stages)


@hook_app.command("pre-commit")
def pre_commit() -> None:
    """Format the code; abort the commit if formatting fails."""
    ctx = build_context()
    _run(ctx, "pre-commit", PRE_COMMIT_STAGES)


@hook_app.command("pre-push")
def pre_push(
    remote: str | None = typer.Argument(None, help="Remote name, passed by git"),
    url: str | None = typer.Argument(None, help="Remote URL, passed by git"),
) -> None:
    """Format check, clippy with warnings as errors, then tests."""
    del remote, url
    ctx = build_context()
    _run(ctx, "pre-push", PRE_PUSH_STAGES)


@hook_app.command("install")
def install(
    force: bool = typer.Option(False, "--force", help="Replace hooks not written by shipyard"),
) -> None:
    """Install the pre-commit and pre-push hooks into the repository's hooks dir."""
    ctx = build_context()
    hooks_dir = exit_on_error(resolve_hooks_dir(ctx.project.root), ctx, ErrorCode.ENV_ERROR)
    written = exit_on_error(install_hooks(hooks_dir, force=force), ctx, ErrorCode.ENV_ERROR)
    for path in written:
        ctx.console.success(str(path))
