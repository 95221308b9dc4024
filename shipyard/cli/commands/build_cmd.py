"""Build command - run the Platform Builder for one target."""

from __future__ import annotations

from enum import StrEnum

import typer

from shipyard.cli.context import build_context
from shipyard.core.errors import ErrorCode
from shipyard.core.result import Err, Ok
from shipyard.output.console import Style
from shipyard.output.errors import build_error_exit_code, print_build_error
from shipyard.platform.detection import detect_platform
from shipyard.services.artifact_store import ArtifactStore
from shipyard.services.builder import PlatformBuilder
from shipyard.services.targets import get_target


class TargetName(StrEnum):
    linux = "linux"
    windows = "windows"
    macos = "macos"


def build(
    target: TargetName | None = typer.Option(
        None, "--target", help="Release platform (default: host platform)", show_default=False
    ),
    store: bool = typer.Option(True, "--store/--no-store", help="Put the artifact into the store"),
    reset_store: bool = typer.Option(
        False, "--reset-store", help="Empty the artifact store before building"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print commands without running them"),
) -> None:
    """Build, rename and store the release binary for one platform."""
    ctx = build_context()

    os_id = target.value if target is not None else detect_platform().os_id
    platform_target = get_target(os_id) if os_id is not None else None
    if platform_target is None:
        ctx.console.error("cannot infer the target for this host; pass --target")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    artifact_store: ArtifactStore | None = None
    if store and not dry_run:
        artifact_store = ArtifactStore(ctx.project.store_dir)
        if reset_store:
            artifact_store.reset()

    builder = PlatformBuilder(project=ctx.project, console=ctx.console, store=artifact_store)
    match builder.build(platform_target, dry_run=dry_run):
        case Ok(result):
            if result.stored_path is not None:
                ctx.console.print(f"store: {result.stored_path}", Style.DIM)
        case Err(error):
            print_build_error(error, ctx.console)
            raise typer.Exit(code=build_error_exit_code(error))
