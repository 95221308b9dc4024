from __future__ import annotations

from pathlib import Path

import pytest
import typer

from shipyard.cli.context import CLIContext
from shipyard.core.config import Config
from shipyard.core.errors import ErrorCode
from shipyard.core.project import Project
from shipyard.core.result import Err, Ok, Result
from shipyard.output.console import MockConsole
from shipyard.platform.process import ProcessError
from shipyard.services import builder as builder_mod


def _ctx(tmp_path: Path) -> CLIContext:
    return CLIContext(
        project=Project(root=tmp_path, config=Config(), program="program"),
        console=MockConsole(),
    )


def test_dry_run_prints_plan(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import shipyard.cli.commands.build_cmd as build_cmd

    ctx = _ctx(tmp_path)
    monkeypatch.setattr(build_cmd, "build_context", lambda: ctx)

    build_cmd.build(
        target=build_cmd.TargetName.macos, store=True, reset_store=False, dry_run=True
    )

    assert isinstance(ctx.console, MockConsole)
    assert ctx.console.find("cargo build --release --target x86_64-apple-darwin")
    assert not (tmp_path / ".shipyard").exists()


def test_fetch_failure_exits_build_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    import shipyard.cli.commands.build_cmd as build_cmd

    ctx = _ctx(tmp_path)
    monkeypatch.setattr(build_cmd, "build_context", lambda: ctx)

    def fake_run(
        cmd: list[str], *, cwd: Path, timeout: float | None = None
    ) -> Result[str, ProcessError]:
        del cwd
        del timeout
        if cmd[:2] == ["cargo", "fetch"]:
            return Err(ProcessError(tuple(cmd), 101, "", "failed to resolve"))
        return Ok("")

    monkeypatch.setattr(builder_mod, "run_process", fake_run)

    with pytest.raises(typer.Exit) as exc:
        build_cmd.build(
            target=build_cmd.TargetName.windows, store=False, reset_store=False, dry_run=False
        )

    assert exc.value.exit_code == int(ErrorCode.BUILD_ERROR)
    assert isinstance(ctx.console, MockConsole)
    assert ctx.console.find("[windows] cargo fetch failed (exit 101)")
