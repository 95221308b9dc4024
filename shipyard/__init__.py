"""shipyard - cross-platform build and draft-release orchestration."""

__version__ = "0.1.0"
