"""Platform Builder.

Turns one PlatformTarget into one stored artifact:

    precondition (per target, optional) -> rustup target add -> cargo fetch
    -> cargo build --release --target <triple> -> rename -> store.put

Any failing step ends this target's build. Builders never look at each
other; a failure is reported to the caller (and, in a pipeline run, as an
abandoned store key).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from shipyard.core.project import Project
from shipyard.core.result import Err, Ok, Result
from shipyard.output.console import ConsoleProtocol, PrefixedConsole, Style
from shipyard.platform.process import ProcessError
from shipyard.platform.process import run as run_process
from shipyard.services.artifact_store import ArtifactStore
from shipyard.services.build_errors import (
    BuildError,
    CompileError,
    DependencyFetchError,
    PreconditionError,
    RenameError,
    ToolchainError,
)
from shipyard.services.targets import (
    Command,
    PlatformTarget,
    artifact_filename,
    artifact_key,
    built_binary_path,
)

StepKind = Literal["precondition", "toolchain", "fetch", "compile"]

_PRECONDITION_TIMEOUT_SECONDS = 15 * 60.0
_TOOLCHAIN_TIMEOUT_SECONDS = 10 * 60.0
_FETCH_TIMEOUT_SECONDS = 15 * 60.0
_COMPILE_TIMEOUT_SECONDS = 60 * 60.0


@dataclass(frozen=True, slots=True)
class BuildResult:
    """A renamed binary, handed over to the store.

    Attributes:
        target: Platform it was built for
        binary_path: Renamed file in the cargo target dir
        stored_path: Copy held by the Artifact Store (None if not stored)
    """

    target: PlatformTarget
    binary_path: Path
    stored_path: Path | None = None


@dataclass(frozen=True, slots=True)
class BuildStep:
    """One planned command and the error it maps to on failure."""

    kind: StepKind
    cmd: Command
    timeout: float


class PlatformBuilder:
    """Builds and stores the release artifact for one target at a time."""

    def __init__(
        self,
        *,
        project: Project,
        console: ConsoleProtocol,
        store: ArtifactStore | None = None,
    ) -> None:
        self._project = project
        self._console = console
        self._store = store

    def commands_for(self, target: PlatformTarget) -> list[BuildStep]:
        """Planned external commands for `target`, in execution order."""
        build_cfg = self._project.config.build
        steps: list[BuildStep] = []

        if target.precondition is not None and build_cfg.install_native_deps:
            for cmd in target.precondition(build_cfg):
                steps.append(BuildStep("precondition", cmd, _PRECONDITION_TIMEOUT_SECONDS))

        if build_cfg.ensure_toolchain_target:
            steps.append(
                BuildStep(
                    "toolchain",
                    ("rustup", "target", "add", target.triple),
                    _TOOLCHAIN_TIMEOUT_SECONDS,
                )
            )

        steps.append(BuildStep("fetch", ("cargo", "fetch"), _FETCH_TIMEOUT_SECONDS))
        steps.append(
            BuildStep(
                "compile",
                (
                    "cargo",
                    "build",
                    "--release",
                    "--target",
                    target.triple,
                    "--target-dir",
                    str(self._project.target_dir),
                ),
                _COMPILE_TIMEOUT_SECONDS,
            )
        )
        return steps

    def output_paths(self, target: PlatformTarget) -> tuple[Path, Path]:
        """(cargo output, renamed artifact) for `target`."""
        built = built_binary_path(self._project.target_dir, self._project.program, target)
        renamed = built.with_name(artifact_filename(self._project.program, target))
        return built, renamed

    def build(
        self, target: PlatformTarget, *, dry_run: bool = False
    ) -> Result[BuildResult, BuildError]:
        """Run every step for `target` and store the renamed binary.

        Returns:
            Ok(BuildResult) on success
            Err(BuildError) naming the first step that failed
        """
        console = PrefixedConsole(self._console, target.os_id)

        for step in self.commands_for(target):
            console.print(" ".join(step.cmd), Style.DIM)
            if dry_run:
                continue
            result = run_process(list(step.cmd), cwd=self._project.root, timeout=step.timeout)
            if isinstance(result, Err):
                return Err(_step_error(step, target, result.error))

        built, renamed = self.output_paths(target)
        console.print(f"rename {built.name} -> {renamed.name}", Style.DIM)
        if dry_run:
            return Ok(BuildResult(target=target, binary_path=renamed))

        rename_result = _rename_artifact(target, built, renamed)
        if isinstance(rename_result, Err):
            return rename_result

        stored_path: Path | None = None
        if self._store is not None:
            key = artifact_key(self._project.program, target)
            put = self._store.put(key, renamed)
            if isinstance(put, Err):
                return put
            stored_path = put.value
            console.print(f"stored as {key}", Style.DIM)

        console.success(str(renamed))
        return Ok(BuildResult(target=target, binary_path=renamed, stored_path=stored_path))


def _step_error(step: BuildStep, target: PlatformTarget, error: ProcessError) -> BuildError:
    detail = error.stderr_tail()
    match step.kind:
        case "precondition":
            return PreconditionError(os_id=target.os_id, returncode=error.returncode, detail=detail)
        case "toolchain":
            return ToolchainError(
                os_id=target.os_id,
                triple=target.triple,
                returncode=error.returncode,
                detail=detail,
            )
        case "fetch":
            return DependencyFetchError(
                os_id=target.os_id, returncode=error.returncode, detail=detail
            )
        case _:
            return CompileError(
                os_id=target.os_id,
                triple=target.triple,
                returncode=error.returncode,
                detail=detail,
            )


def _rename_artifact(
    target: PlatformTarget, built: Path, renamed: Path
) -> Result[Path, RenameError]:
    if not built.is_file():
        return Err(
            RenameError(
                os_id=target.os_id,
                source=built,
                destination=renamed,
                reason="build output not found",
            )
        )
    try:
        # Replaces a renamed file left by an earlier run.
        os.replace(built, renamed)
    except OSError as e:
        return Err(
            RenameError(os_id=target.os_id, source=built, destination=renamed, reason=str(e))
        )
    return Ok(renamed)
