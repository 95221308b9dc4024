"""Sequential quality gates: CI, pre-commit and pre-push.

A gate is an ordered list of stages. Stages run one at a time and the gate
stops at the first failing stage; later stages are not executed and only
that failure is reported.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from shipyard.core.config import BuildConfig
from shipyard.core.result import Err, Ok, Result
from shipyard.output.console import ConsoleProtocol, Style
from shipyard.platform.process import run_streaming
from shipyard.services.targets import Command, linux_native_deps

__all__ = [
    "GateFailure",
    "GateStage",
    "FORMAT_FIX",
    "FORMAT_CHECK",
    "LINT",
    "TEST",
    "PRE_COMMIT_STAGES",
    "PRE_PUSH_STAGES",
    "ci_stages",
    "run_gate",
]

_STAGE_TIMEOUT_SECONDS = 60 * 60.0


@dataclass(frozen=True, slots=True)
class GateStage:
    name: str
    cmd: Command


@dataclass(frozen=True, slots=True)
class GateFailure:
    gate: str
    stage: str
    returncode: int
    detail: str = ""

    def __str__(self) -> str:
        return f"{self.gate}: {self.stage} failed (exit {self.returncode})"


FORMAT_FIX = GateStage("format", ("cargo", "fmt", "--all"))
FORMAT_CHECK = GateStage("format-check", ("cargo", "fmt", "--all", "--", "--check"))
LINT = GateStage("lint", ("cargo", "clippy", "--all", "--", "-D", "warnings"))
TEST = GateStage("test", ("cargo", "test", "--all"))

PRE_COMMIT_STAGES: tuple[GateStage, ...] = (FORMAT_FIX,)
PRE_PUSH_STAGES: tuple[GateStage, ...] = (FORMAT_CHECK, LINT, TEST)


def ci_stages(build_cfg: BuildConfig, *, linux_host: bool) -> tuple[GateStage, ...]:
    """CI job stages: native packages (Linux runners), then test, lint, format check."""
    stages: list[GateStage] = []
    if linux_host and build_cfg.install_native_deps:
        for i, cmd in enumerate(linux_native_deps(build_cfg)):
            stages.append(GateStage(f"native-deps-{i + 1}", cmd))
    stages.extend((TEST, LINT, FORMAT_CHECK))
    return tuple(stages)


def run_gate(
    gate: str,
    stages: tuple[GateStage, ...],
    *,
    cwd: Path,
    console: ConsoleProtocol,
) -> Result[None, GateFailure]:
    for stage in stages:
        console.print(f"{gate}: {stage.name}: {' '.join(stage.cmd)}", Style.DIM)
        result = run_streaming(list(stage.cmd), cwd=cwd, timeout=_STAGE_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            e = result.error
            return Err(
                GateFailure(
                    gate=gate,
                    stage=stage.name,
                    returncode=e.returncode,
                    detail=e.stderr.strip(),
                )
            )
    console.success(f"{gate}: {len(stages)} stage(s) passed")
    return Ok(None)
