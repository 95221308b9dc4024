"""Host platform detection.

Used to pick the default build target when `shipyard build` runs on a CI
runner, and to decide whether the CI gate needs the Linux native packages.
"""

from __future__ import annotations

import sys
from enum import Enum
from functools import lru_cache

__all__ = [
    "Platform",
    "detect_platform",
    "is_linux",
]


class Platform(Enum):
    """Host OS. The value is the matching PlatformTarget.os_id."""

    LINUX = "linux"
    MACOS = "macos"
    WINDOWS = "windows"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value

    @property
    def os_id(self) -> str | None:
        return None if self is Platform.UNKNOWN else self.value


# sys.platform prefixes; platform.system() can stall on Windows (WMI).
_PREFIXES: tuple[tuple[str, Platform], ...] = (
    ("linux", Platform.LINUX),
    ("darwin", Platform.MACOS),
    ("win32", Platform.WINDOWS),
    ("cygwin", Platform.WINDOWS),
    ("msys", Platform.WINDOWS),
)


@lru_cache(maxsize=1)
def detect_platform() -> Platform:
    """Detect the current operating system (cached)."""
    system = sys.platform.lower()
    for prefix, platform in _PREFIXES:
        if system.startswith(prefix):
            return platform
    return Platform.UNKNOWN


def is_linux() -> bool:
    return detect_platform() is Platform.LINUX
