"""Console output abstraction.

Services report progress through ConsoleProtocol rather than printing
directly. Production uses RichConsole; tests use MockConsole and assert on
what would have been shown. Builders running in parallel get a
PrefixedConsole so their lines stay attributable to a target.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "OutputRecord",
    "PrefixedConsole",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()  # echoed commands, hints
    BOLD = auto()
    HEADER = auto()  # pipeline state transitions

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Protocol for console output."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None: ...

    def newline(self) -> None: ...


class RichConsole:
    """Console implementation using the Rich library."""

    def __init__(self, *, stderr: bool = False) -> None:
        # Import Rich lazily to avoid import-time dependency
        from rich.console import Console

        self._console = Console(stderr=stderr, highlight=False)
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow",
            Style.INFO: "cyan",
            Style.DIM: "dim",
            Style.BOLD: "bold",
            Style.HEADER: "blue bold",
        }

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        # Commands and compiler output contain brackets; never parse markup.
        self._console.print(message, style=self._style_map.get(style, ""), markup=False)

    def _labelled(self, label: str, style: Style, message: str) -> None:
        from rich.text import Text

        self._console.print(Text.assemble((label, self._style_map[style]), " ", message))

    def success(self, message: str) -> None:
        self._labelled("OK", Style.SUCCESS, message)

    def error(self, message: str) -> None:
        self._labelled("error:", Style.ERROR, message)

    def warning(self, message: str) -> None:
        self._labelled("warning:", Style.WARNING, message)

    def info(self, message: str) -> None:
        self._labelled("info:", Style.INFO, message)

    def header(self, message: str) -> None:
        self._console.print()
        self._console.print(message, style="blue bold", markup=False)

    def newline(self) -> None:
        self._console.print()


@dataclass(frozen=True, slots=True)
class PrefixedConsole:
    """Wraps another console and tags every line with `[prefix]`."""

    inner: ConsoleProtocol
    prefix: str

    def _tag(self, message: str) -> str:
        return f"[{self.prefix}] {message}"

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.inner.print(self._tag(message), style)

    def success(self, message: str) -> None:
        self.inner.success(self._tag(message))

    def error(self, message: str) -> None:
        self.inner.error(self._tag(message))

    def warning(self, message: str) -> None:
        self.inner.warning(self._tag(message))

    def info(self, message: str) -> None:
        self.inner.info(self._tag(message))

    def header(self, message: str) -> None:
        self.inner.header(self._tag(message))

    def newline(self) -> None:
        self.inner.newline()


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console implementation that captures output for testing."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def success(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"OK {message}", Style.SUCCESS))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"error: {message}", Style.ERROR))

    def warning(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"warning: {message}", Style.WARNING))

    def info(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"info: {message}", Style.INFO))

    def header(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.HEADER))

    def newline(self) -> None:
        self.outputs.append(OutputRecord("", Style.DEFAULT))

    # Test helper methods

    def clear(self) -> None:
        self.outputs.clear()

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def has_success(self) -> bool:
        return any(o.style == Style.SUCCESS for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        return [o for o in self.outputs if substring in o.message]

    def count(self, style: Style) -> int:
        return sum(1 for o in self.outputs if o.style == style)
