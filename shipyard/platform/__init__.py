"""Platform abstraction layer."""

from .detection import Platform, detect_platform, is_linux
from .files import write_script
from .process import ProcessError, run, run_streaming

__all__ = [
    # detection
    "Platform",
    "detect_platform",
    "is_linux",
    # files
    "write_script",
    # process
    "ProcessError",
    "run",
    "run_streaming",
]
