"""Project detection and paths.

The project is the Cargo checkout being released. Its root holds a
`shipyard.toml` (optional) and/or a `Cargo.toml`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .config import CONFIG_FILE_NAME, Config, load_config_or_default, parse_toml
from .result import Err, Ok, Result
from .structured import get_str, get_table

__all__ = [
    "Project",
    "ProjectError",
    "detect_project",
    "find_project_upward",
    "is_project_root",
    "PROJECT_ENV_VAR",
]

PROJECT_ENV_VAR = "SHIPYARD_PROJECT"


@dataclass(frozen=True)
class ProjectError:
    """Error when the project cannot be detected or described."""

    message: str
    searched_from: Path | None = None


@dataclass(frozen=True, slots=True)
class Project:
    """A detected project with its resolved configuration.

    Attributes:
        root: Project root directory
        config: Parsed shipyard.toml (defaults when absent)
        program: Binary name the build produces (no extension)
    """

    root: Path
    config: Config
    program: str

    @property
    def config_path(self) -> Path:
        return self.root / CONFIG_FILE_NAME

    @property
    def target_dir(self) -> Path:
        """Cargo target directory."""
        return self.root / self.config.build.target_dir

    @property
    def store_dir(self) -> Path:
        """Artifact Store root for the current run."""
        return self.root / self.config.release.store_dir

    @property
    def download_dir(self) -> Path:
        """Where the publisher lays out retrieved artifacts, one dir per platform."""
        return self.root / self.config.release.download_dir

    def __str__(self) -> str:
        return str(self.root)


def is_project_root(path: Path) -> bool:
    return (path / CONFIG_FILE_NAME).is_file() or (path / "Cargo.toml").is_file()


def find_project_upward(start: Path) -> Path | None:
    for parent in (start, *start.parents):
        if is_project_root(parent):
            return parent
    return None


def _cargo_package_name(root: Path) -> str | None:
    manifest = root / "Cargo.toml"
    if not manifest.is_file():
        return None
    parsed = parse_toml(manifest)
    if isinstance(parsed, Err):
        return None
    package = get_table(parsed.value, "package")
    if package is None:
        return None
    return get_str(package, "name")


def load_project(root: Path) -> Result[Project, ProjectError]:
    """Load config and resolve the program name for a known root."""
    config_result = load_config_or_default(root / CONFIG_FILE_NAME)
    if isinstance(config_result, Err):
        return Err(ProjectError(config_result.error.message, searched_from=root))
    config = config_result.value

    program = config.project.program or _cargo_package_name(root)
    if program is None:
        return Err(
            ProjectError(
                "cannot determine program name: set [project].program in "
                f"{CONFIG_FILE_NAME} or [package].name in Cargo.toml",
                searched_from=root,
            )
        )

    return Ok(Project(root=root, config=config, program=program))


def detect_project(
    *,
    start_dir: Path | None = None,
    env_var: str = PROJECT_ENV_VAR,
) -> Result[Project, ProjectError]:
    """Detect the project root and load it.

    Detection order:
    1. SHIPYARD_PROJECT environment variable (if set and valid)
    2. Search upward from start_dir (or cwd) for shipyard.toml / Cargo.toml
    """
    env_value = os.environ.get(env_var)
    if env_value:
        root = Path(env_value).expanduser().resolve()
        if root.is_dir() and is_project_root(root):
            return load_project(root)

    start = (start_dir or Path.cwd()).resolve()
    found = find_project_upward(start)
    if found is None:
        return Err(
            ProjectError(
                f"no project found (looked for {CONFIG_FILE_NAME} or Cargo.toml)",
                searched_from=start,
            )
        )
    return load_project(found)
