"""Release commands - full pipeline, stand-alone publish stage, and plan."""

from __future__ import annotations

import typer

from shipyard.cli.context import CLIContext, build_context
from shipyard.core.errors import ErrorCode
from shipyard.core.result import Err, Ok
from shipyard.output.console import Style
from shipyard.output.errors import (
    build_error_exit_code,
    print_build_error,
    print_release_error,
    release_error_exit_code,
)
from shipyard.services.artifact_store import ArtifactStore
from shipyard.services.builder import PlatformBuilder
from shipyard.services.release.model import Trigger, normalize_ref
from shipyard.services.release.pipeline import PipelineOutcome, PipelineState, ReleasePipeline
from shipyard.services.release.publisher import ReleasePublisher
from shipyard.services.targets import TARGETS

release_app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Build all platforms and publish a draft GitHub release.",
)

_REF_HELP = "Tag or ref to release, e.g. v1.2.0 (default: $GITHUB_REF)"
_EVENT_HELP = "Triggering event name (default: $GITHUB_EVENT_NAME or 'push')"


def _trigger(ref: str | None, event: str | None) -> Trigger:
    return Trigger.from_env(event=event, ref=normalize_ref(ref) if ref else None)


def _report_outcome(ctx: CLIContext, outcome: PipelineOutcome) -> None:
    states = " -> ".join(str(s) for s in outcome.history)
    ctx.console.print(f"states: {states}", Style.DIM)

    match outcome.state:
        case PipelineState.DONE:
            return
        case PipelineState.IDLE:
            ctx.console.error("not a release trigger; nothing was built")
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))
        case _:
            pass

    code = int(ErrorCode.BUILD_ERROR)
    for target in TARGETS:
        error = outcome.failures.get(target.os_id)
        if error is not None:
            print_build_error(error, ctx.console)
            code = build_error_exit_code(error)

    if outcome.publish_error is not None:
        print_release_error(outcome.publish_error, ctx.console)
        code = release_error_exit_code(outcome.publish_error)
    elif outcome.failures:
        ctx.console.print("no release was created; built artifacts were discarded", Style.DIM)

    raise typer.Exit(code=code)


@release_app.command("run")
def run(
    ref: str | None = typer.Option(None, "--ref", help=_REF_HELP, show_default=False),
    event: str | None = typer.Option(None, "--event", help=_EVENT_HELP, show_default=False),
) -> None:
    """Build all three platforms in parallel, join, then create the draft release."""
    ctx = build_context()
    pipeline = ReleasePipeline(project=ctx.project, console=ctx.console)
    outcome = pipeline.run(_trigger(ref, event))
    _report_outcome(ctx, outcome)


@release_app.command("publish")
def publish(
    ref: str | None = typer.Option(None, "--ref", help=_REF_HELP, show_default=False),
    event: str | None = typer.Option(None, "--event", help=_EVENT_HELP, show_default=False),
) -> None:
    """Publish from a store already populated by `shipyard build` jobs."""
    ctx = build_context()
    store = ArtifactStore.open_sealed(ctx.project.store_dir)
    publisher = ReleasePublisher(project=ctx.project, console=ctx.console)

    match publisher.publish(_trigger(ref, event), store):
        case Ok(_):
            return
        case Err(error):
            print_release_error(error, ctx.console)
            raise typer.Exit(code=release_error_exit_code(error))


@release_app.command("plan")
def plan(
    ref: str = typer.Option("v0.0.0", "--ref", help="Tag used in the printed release command"),
) -> None:
    """Print every command a release run would execute, without running any."""
    ctx = build_context()
    builder = PlatformBuilder(project=ctx.project, console=ctx.console)
    publisher = ReleasePublisher(project=ctx.project, console=ctx.console)

    for target in TARGETS:
        ctx.console.header(f"build {target.os_id} ({target.triple})")
        for step in builder.commands_for(target):
            ctx.console.print(" ".join(step.cmd))
        built, renamed = builder.output_paths(target)
        ctx.console.print(f"rename {built} -> {renamed.name}")

    tag = Trigger.from_env(ref=normalize_ref(ref)).tag or ref
    ctx.console.header("publish")
    ctx.console.print(" ".join(publisher.plan(tag)))
