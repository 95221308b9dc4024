"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, TypeVar

import typer

from shipyard.core.errors import ErrorCode
from shipyard.core.result import Err, Result
from shipyard.output.console import Style

if TYPE_CHECKING:
    from shipyard.cli.context import CLIContext


T = TypeVar("T")


class HintedError(Protocol):
    @property
    def message(self) -> str: ...

    @property
    def hint(self) -> str | None: ...


def exit_on_error(
    result: Result[T, HintedError],
    ctx: CLIContext,
    error_code: ErrorCode = ErrorCode.BUILD_ERROR,
) -> T:
    """Return the Ok value, or print `error: message` / `hint: ...` and exit."""
    if isinstance(result, Err):
        ctx.console.error(result.error.message)
        if result.error.hint:
            ctx.console.print(f"hint: {result.error.hint}", Style.DIM)
        raise typer.Exit(code=int(error_code))
    return result.value
