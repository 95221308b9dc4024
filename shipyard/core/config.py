"""Typed configuration loading and access.

The optional `shipyard.toml` at the project root is mapped onto frozen
dataclasses. Every field has a default, so a project without the file gets
the same pipeline the stock release workflow describes.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_str, get_str_list, get_table

__all__ = [
    "BuildConfig",
    "Config",
    "ConfigError",
    "ProjectConfig",
    "ReleaseConfig",
    "CONFIG_FILE_NAME",
    "DEFAULT_NATIVE_PACKAGES",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILE_NAME = "shipyard.toml"

# Compiled-UI dependencies needed to link the program on Linux runners.
DEFAULT_NATIVE_PACKAGES = (
    "build-essential",
    "libxcb-shape0-dev",
    "libxcb-xfixes0-dev",
)


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ProjectConfig:
    """Identity of the program being released.

    `program` falls back to `[package].name` from Cargo.toml when unset.
    `repo` (owner/name) is passed to gh; when unset gh infers it from the
    checkout's remote.
    """

    program: str | None = None
    repo: str | None = None


@dataclass(frozen=True, slots=True)
class BuildConfig:
    """Platform Builder settings."""

    target_dir: str = "target"
    install_native_deps: bool = True
    ensure_toolchain_target: bool = True
    native_packages: tuple[str, ...] = DEFAULT_NATIVE_PACKAGES


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Release Publisher settings."""

    tag_pattern: str = "v*"
    store_dir: str = ".shipyard/store"
    download_dir: str = "artifacts"


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    project: ProjectConfig = field(default_factory=ProjectConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    release: ReleaseConfig = field(default_factory=ReleaseConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        project: StrDict = get_table(data, "project") or {}
        build: StrDict = get_table(data, "build") or {}
        release: StrDict = get_table(data, "release") or {}

        install_native_deps = get_bool(build, "install_native_deps")
        ensure_toolchain_target = get_bool(build, "ensure_toolchain_target")

        return cls(
            project=ProjectConfig(
                program=get_str(project, "program"),
                repo=get_str(project, "repo"),
            ),
            build=BuildConfig(
                target_dir=get_str(build, "target_dir") or "target",
                install_native_deps=True if install_native_deps is None else install_native_deps,
                ensure_toolchain_target=(
                    True if ensure_toolchain_target is None else ensure_toolchain_target
                ),
                native_packages=get_str_list(build, "native_packages") or DEFAULT_NATIVE_PACKAGES,
            ),
            release=ReleaseConfig(
                tag_pattern=get_str(release, "tag_pattern") or "v*",
                store_dir=get_str(release, "store_dir") or ".shipyard/store",
                download_dir=get_str(release, "download_dir") or "artifacts",
            ),
        )


def parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file into a string-keyed table."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("TOML root must be a table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"File not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading {path.name}: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to shipyard.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Load config if the file exists, otherwise return the defaults.

    Unlike a missing file, a present-but-broken file is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)
