"""Git hook installation for the local quality gates."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from shipyard.core.result import Err, Ok, Result
from shipyard.platform.files import write_script
from shipyard.platform.process import run as run_process

HOOK_MARKER = "# managed by shipyard"
HOOK_NAMES = ("pre-commit", "pre-push")

_GIT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class HookError:
    message: str
    hint: str | None = None


def hook_script(hook: str) -> str:
    return f'#!/bin/sh\n{HOOK_MARKER}\nexec shipyard hook {hook} "$@"\n'


def is_managed_hook(path: Path) -> bool:
    try:
        return HOOK_MARKER in path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return False


def resolve_hooks_dir(project_root: Path) -> Result[Path, HookError]:
    """Ask git where hooks live for the checkout containing `project_root`.

    Covers a project in a subdirectory of the repository, worktrees (where
    `.git` is a file) and `core.hooksPath`.
    """
    result = run_process(
        ["git", "rev-parse", "--git-path", "hooks"],
        cwd=project_root,
        timeout=_GIT_TIMEOUT_SECONDS,
    )
    if isinstance(result, Err):
        return Err(
            HookError(
                message=f"not a git checkout: {project_root}",
                hint=result.error.stderr_tail(lines=3) or "Run: git init",
            )
        )
    # git prints the path relative to the cwd unless it lies elsewhere.
    return Ok(project_root / result.value.strip())


def install_hooks(hooks_dir: Path, *, force: bool = False) -> Result[list[Path], HookError]:
    """Write pre-commit and pre-push scripts into `hooks_dir`.

    Hooks not written by shipyard are left alone unless `force` is set.
    """
    written: list[Path] = []
    for hook in HOOK_NAMES:
        path = hooks_dir / hook
        if path.exists() and not force and not is_managed_hook(path):
            return Err(
                HookError(
                    message=f"refusing to overwrite existing hook: {path}",
                    hint="Re-run with --force to replace it",
                )
            )
        try:
            write_script(path, hook_script(hook))
        except OSError as e:
            return Err(HookError(message=f"failed to write {path}: {e}"))
        written.append(path)

    return Ok(written)
