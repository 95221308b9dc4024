"""Subprocess execution with Result-based error handling.

Every external step of the pipeline (apt, rustup, cargo, gh) goes through
this module. A non-zero exit is never raised; it comes back as a
ProcessError the caller maps onto its own error type.

Usage:
    result = run(["cargo", "fetch"], cwd=project.root)
    match result:
        case Ok(stdout):
            ...
        case Err(error):
            console.error(f"{error}: {error.stderr_tail()}")
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from shipyard.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run", "run_streaming"]

# Exit status recorded when the process never ran or was killed on timeout.
NOT_RUN = -1


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that did not exit 0.

    Attributes:
        command: argv as executed
        returncode: exit status, or NOT_RUN
        stdout: captured stdout ("" when streaming)
        stderr: captured stderr, or why the command could not run
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        shown = " ".join(self.command[:3])
        if len(self.command) > 3:
            shown += " ..."
        return f"{shown} failed (exit {self.returncode})"

    def stderr_tail(self, lines: int = 20) -> str:
        """Last lines of stderr (compiler output can be long)."""
        return "\n".join(self.stderr.strip().splitlines()[-lines:])


def _execute(
    cmd: list[str],
    *,
    cwd: Path,
    env: dict[str, str] | None,
    timeout: float | None,
    capture: bool,
) -> Result[subprocess.CompletedProcess[str], ProcessError]:
    argv = tuple(cmd)
    try:
        completed = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            capture_output=capture,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        partial = e.stdout if isinstance(e.stdout, str) else ""
        return Err(ProcessError(argv, NOT_RUN, partial, f"Command timed out after {timeout}s"))
    except OSError as e:
        # Missing executable, bad cwd, permission denied.
        return Err(ProcessError(argv, NOT_RUN, "", str(e)))

    if completed.returncode != 0:
        return Err(
            ProcessError(
                argv,
                completed.returncode,
                completed.stdout or "",
                completed.stderr or "",
            )
        )
    return Ok(completed)


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Run `cmd` in `cwd` and capture its output.

    Returns:
        Ok(stdout), or Err(ProcessError) with both streams on failure.
    """
    return _execute(cmd, cwd=cwd, env=env, timeout=timeout, capture=True).map(
        lambda completed: completed.stdout
    )


def run_streaming(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[None, ProcessError]:
    """Run `cmd` with output going straight to the terminal.

    Used by the sequential gates (hooks, CI) where test and lint output
    should appear as it happens. Nothing is captured.
    """
    return _execute(cmd, cwd=cwd, env=env, timeout=timeout, capture=False).map(lambda _: None)
