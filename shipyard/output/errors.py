"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from shipyard.core.errors import ErrorCode
from shipyard.output.console import Style
from shipyard.services.build_errors import (
    BuildError,
    BuilderCrashError,
    CompileError,
    DependencyFetchError,
    DuplicateArtifactError,
    PreconditionError,
    RenameError,
    StoreWriteError,
    ToolchainError,
)
from shipyard.services.release.errors import ReleaseError

if TYPE_CHECKING:
    from shipyard.output.console import ConsoleProtocol

__all__ = [
    "build_error_exit_code",
    "print_build_error",
    "print_release_error",
    "release_error_exit_code",
]


def _print_detail(detail: str, console: ConsoleProtocol) -> None:
    for line in detail.splitlines():
        console.print(f"  {line}", Style.DIM)


def print_build_error(error: BuildError, console: ConsoleProtocol) -> None:
    """Print build error to console with appropriate formatting."""
    match error:
        case PreconditionError(os_id=os_id, returncode=rc, detail=detail):
            console.error(f"[{os_id}] native dependency install failed (exit {rc})")
            _print_detail(detail, console)
        case ToolchainError(os_id=os_id, triple=triple, returncode=rc, detail=detail, hint=hint):
            console.error(f"[{os_id}] rustup target add {triple} failed (exit {rc})")
            _print_detail(detail, console)
            console.print(f"hint: {hint}", Style.DIM)
        case DependencyFetchError(os_id=os_id, returncode=rc, detail=detail):
            console.error(f"[{os_id}] cargo fetch failed (exit {rc})")
            _print_detail(detail, console)
        case CompileError(os_id=os_id, triple=triple, returncode=rc, detail=detail):
            console.error(f"[{os_id}] build for {triple} failed (exit {rc})")
            _print_detail(detail, console)
        case RenameError(os_id=os_id, source=source, destination=destination, reason=reason):
            console.error(f"[{os_id}] cannot rename {source} -> {destination.name}: {reason}")
        case DuplicateArtifactError(key=key):
            console.error(f"artifact already stored: {key}")
            console.print(
                "hint: the store still holds this key from an earlier run; "
                "pass --reset-store to start a fresh one",
                Style.DIM,
            )
        case StoreWriteError(key=key, reason=reason):
            console.error(f"cannot store {key}: {reason}")
        case BuilderCrashError(os_id=os_id, reason=reason):
            console.error(f"[{os_id}] builder crashed: {reason}")


def build_error_exit_code(error: BuildError) -> int:
    match error:
        case ToolchainError():
            return int(ErrorCode.ENV_ERROR)
        case StoreWriteError():
            return int(ErrorCode.IO_ERROR)
        case _:
            return int(ErrorCode.BUILD_ERROR)


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def release_error_exit_code(error: ReleaseError) -> int:
    match error.kind:
        case "not_a_tag":
            return int(ErrorCode.USER_ERROR)
        case "gh_missing" | "gh_auth_required":
            return int(ErrorCode.ENV_ERROR)
        case "gh_unreachable":
            return int(ErrorCode.NETWORK_ERROR)
        case "join_failed":
            return int(ErrorCode.BUILD_ERROR)
        case "missing_file":
            return int(ErrorCode.IO_ERROR)
        case _:
            return int(ErrorCode.PUBLISH_ERROR)
