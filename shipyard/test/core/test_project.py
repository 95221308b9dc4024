"""Tests for shipyard.core.project module."""

from __future__ import annotations

from pathlib import Path

import pytest

from shipyard.core.project import detect_project, find_project_upward, load_project
from shipyard.core.result import Err, Ok


def _cargo(root: Path, name: str = "kill-zen-all") -> None:
    (root / "Cargo.toml").write_text(
        f'[package]\nname = "{name}"\nversion = "0.1.0"\n', encoding="utf-8"
    )


def test_program_from_cargo_manifest(tmp_path: Path) -> None:
    _cargo(tmp_path)

    result = load_project(tmp_path)
    assert isinstance(result, Ok)
    assert result.value.program == "kill-zen-all"


def test_config_program_overrides_cargo(tmp_path: Path) -> None:
    _cargo(tmp_path)
    (tmp_path / "shipyard.toml").write_text('[project]\nprogram = "kza"\n', encoding="utf-8")

    result = load_project(tmp_path)
    assert isinstance(result, Ok)
    assert result.value.program == "kza"


def test_no_program_name_is_error(tmp_path: Path) -> None:
    (tmp_path / "shipyard.toml").write_text("", encoding="utf-8")

    result = load_project(tmp_path)
    assert isinstance(result, Err)
    assert "program name" in result.error.message


def test_paths_follow_config(tmp_path: Path) -> None:
    _cargo(tmp_path)
    (tmp_path / "shipyard.toml").write_text(
        '[build]\ntarget_dir = "out"\n[release]\nstore_dir = "s"\ndownload_dir = "d"\n',
        encoding="utf-8",
    )

    project = load_project(tmp_path).unwrap()
    assert project is not None
    assert project.target_dir == tmp_path / "out"
    assert project.store_dir == tmp_path / "s"
    assert project.download_dir == tmp_path / "d"


def test_find_upward(tmp_path: Path) -> None:
    _cargo(tmp_path)
    nested = tmp_path / "src" / "bin"
    nested.mkdir(parents=True)

    assert find_project_upward(nested) == tmp_path


def test_detect_uses_env_var(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _cargo(tmp_path, "from-env")
    monkeypatch.setenv("SHIPYARD_PROJECT", str(tmp_path))

    result = detect_project(start_dir=Path("/"))
    assert isinstance(result, Ok)
    assert result.value.program == "from-env"


def test_detect_not_found(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SHIPYARD_PROJECT", raising=False)
    empty = tmp_path / "empty"
    empty.mkdir()
    monkeypatch.setattr("shipyard.core.project.find_project_upward", lambda start: None)

    result = detect_project(start_dir=empty)
    assert isinstance(result, Err)
    assert result.error.searched_from == empty.resolve()
