from __future__ import annotations

from pathlib import Path

import pytest
import typer

from shipyard.cli.context import CLIContext
from shipyard.core.config import Config
from shipyard.core.errors import ErrorCode
from shipyard.core.project import Project
from shipyard.output.console import MockConsole


def _ctx(tmp_path: Path) -> CLIContext:
    return CLIContext(
        project=Project(root=tmp_path, config=Config(), program="program"),
        console=MockConsole(),
    )


def test_install_reports_written_workflows(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    import shipyard.cli.commands.workflows_cmd as workflows_cmd

    ctx = _ctx(tmp_path)
    monkeypatch.setattr(workflows_cmd, "build_context", lambda: ctx)

    workflows_cmd.install(force=False)

    assert (tmp_path / ".github" / "workflows" / "release.yml").is_file()
    assert (tmp_path / ".github" / "workflows" / "ci.yml").is_file()
    assert isinstance(ctx.console, MockConsole)
    assert len(ctx.console.messages) == 2


def test_install_foreign_workflow_is_env_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    import shipyard.cli.commands.workflows_cmd as workflows_cmd

    workflows = tmp_path / ".github" / "workflows"
    workflows.mkdir(parents=True)
    (workflows / "release.yml").write_text("name: mine\n", encoding="utf-8")
    monkeypatch.setattr(workflows_cmd, "build_context", lambda: _ctx(tmp_path))

    with pytest.raises(typer.Exit) as exc:
        workflows_cmd.install(force=False)

    assert exc.value.exit_code == int(ErrorCode.ENV_ERROR)
