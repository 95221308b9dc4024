"""Release platform table and artifact naming.

The three targets are fixed. Everything the builder produces and the
publisher expects is derived from this table by pure functions, so the
naming contract between the two lives in exactly one place.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from shipyard.core.config import BuildConfig

__all__ = [
    "Command",
    "Precondition",
    "PlatformTarget",
    "LINUX",
    "WINDOWS",
    "MACOS",
    "TARGETS",
    "artifact_filename",
    "artifact_key",
    "built_binary_path",
    "expected_release_files",
    "get_target",
    "linux_native_deps",
]

Command = tuple[str, ...]
Precondition = Callable[[BuildConfig], tuple[Command, ...]]


def linux_native_deps(config: BuildConfig) -> tuple[Command, ...]:
    """Install the compiled-UI packages the program links against."""
    return (
        ("sudo", "apt", "update"),
        ("sudo", "apt", "install", "-y", "-q", *config.native_packages),
    )


@dataclass(frozen=True, slots=True)
class PlatformTarget:
    """One release platform.

    Attributes:
        os_id: Short platform id, used in store keys and download dirs
        triple: Rust target triple passed to cargo
        binary_extension: "" or ".exe"
        artifact_suffix: Inserted between program name and extension
        precondition: Optional per-target setup commands (None for most)
    """

    os_id: str
    triple: str
    binary_extension: str
    artifact_suffix: str
    precondition: Precondition | None = None

    def __str__(self) -> str:
        return self.os_id


LINUX = PlatformTarget(
    os_id="linux",
    triple="x86_64-unknown-linux-gnu",
    binary_extension="",
    artifact_suffix="-linux",
    precondition=linux_native_deps,
)
WINDOWS = PlatformTarget(
    os_id="windows",
    triple="x86_64-pc-windows-gnu",
    binary_extension=".exe",
    artifact_suffix="-windows",
)
MACOS = PlatformTarget(
    os_id="macos",
    triple="x86_64-apple-darwin",
    binary_extension="",
    artifact_suffix="-macos",
)

# Order is the release file order.
TARGETS: tuple[PlatformTarget, ...] = (LINUX, WINDOWS, MACOS)


def get_target(os_id: str) -> PlatformTarget | None:
    for target in TARGETS:
        if target.os_id == os_id:
            return target
    return None


def artifact_filename(program: str, target: PlatformTarget) -> str:
    """Published file name: `<program><suffix><ext>`.

    Example: artifact_filename("kill-zen-all", WINDOWS) -> "kill-zen-all-windows.exe"
    """
    return f"{program}{target.artifact_suffix}{target.binary_extension}"


def artifact_key(program: str, target: PlatformTarget) -> str:
    """Artifact Store key: `<program>-<os_id>`."""
    return f"{program}-{target.os_id}"


def built_binary_path(target_dir: Path, program: str, target: PlatformTarget) -> Path:
    """Where `cargo build --release --target <triple>` leaves the binary."""
    return target_dir / target.triple / "release" / f"{program}{target.binary_extension}"


def expected_release_files(
    download_dir: Path,
    program: str,
    targets: tuple[PlatformTarget, ...] = TARGETS,
) -> tuple[Path, ...]:
    """Paths the publisher attaches, one per platform directory."""
    return tuple(
        download_dir / target.os_id / artifact_filename(program, target) for target in targets
    )
