from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class PreconditionError:
    os_id: str
    returncode: int
    detail: str = ""


@dataclass(frozen=True, slots=True)
class ToolchainError:
    os_id: str
    triple: str
    returncode: int
    detail: str = ""
    hint: str = "Install rustup: https://rustup.rs/"


@dataclass(frozen=True, slots=True)
class DependencyFetchError:
    os_id: str
    returncode: int
    detail: str = ""


@dataclass(frozen=True, slots=True)
class CompileError:
    os_id: str
    triple: str
    returncode: int
    detail: str = ""


@dataclass(frozen=True, slots=True)
class RenameError:
    os_id: str
    source: Path
    destination: Path
    reason: str


@dataclass(frozen=True, slots=True)
class BuilderCrashError:
    """The builder raised instead of returning an error."""

    os_id: str
    reason: str


@dataclass(frozen=True, slots=True)
class DuplicateArtifactError:
    key: str


@dataclass(frozen=True, slots=True)
class StoreWriteError:
    key: str
    reason: str


BuildError = (
    PreconditionError
    | ToolchainError
    | DependencyFetchError
    | CompileError
    | RenameError
    | DuplicateArtifactError
    | StoreWriteError
    | BuilderCrashError
)
