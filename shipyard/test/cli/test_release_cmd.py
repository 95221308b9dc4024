from __future__ import annotations

from pathlib import Path

import pytest
import typer

from shipyard.cli.context import CLIContext
from shipyard.core.config import Config
from shipyard.core.errors import ErrorCode
from shipyard.core.project import Project
from shipyard.output.console import MockConsole
from shipyard.services.build_errors import PreconditionError
from shipyard.services.release.errors import ReleaseError
from shipyard.services.release.model import Trigger
from shipyard.services.release.pipeline import PipelineOutcome, PipelineState


def _ctx(tmp_path: Path) -> CLIContext:
    return CLIContext(
        project=Project(root=tmp_path, config=Config(), program="program"),
        console=MockConsole(),
    )


def _patch_pipeline(monkeypatch: pytest.MonkeyPatch, outcome: PipelineOutcome) -> list[Trigger]:
    import shipyard.cli.commands.release_cmd as release_cmd

    seen: list[Trigger] = []

    class FakePipeline:
        def __init__(self, **_: object) -> None:
            pass

        def run(self, trigger: Trigger) -> PipelineOutcome:
            seen.append(trigger)
            return outcome

    monkeypatch.setattr(release_cmd, "ReleasePipeline", FakePipeline)
    return seen


def test_run_done_exits_cleanly(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import shipyard.cli.commands.release_cmd as release_cmd

    ctx = _ctx(tmp_path)
    monkeypatch.setattr(release_cmd, "build_context", lambda: ctx)
    seen = _patch_pipeline(
        monkeypatch,
        PipelineOutcome(
            state=PipelineState.DONE,
            history=[PipelineState.IDLE, PipelineState.BUILDING, PipelineState.DONE],
        ),
    )

    release_cmd.run(ref="v1.2.0", event="push")

    assert seen == [Trigger(event="push", ref="refs/tags/v1.2.0")]
    assert isinstance(ctx.console, MockConsole)
    assert ctx.console.find("idle -> building -> done")


def test_run_not_triggered_is_user_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import shipyard.cli.commands.release_cmd as release_cmd

    monkeypatch.setattr(release_cmd, "build_context", lambda: _ctx(tmp_path))
    _patch_pipeline(monkeypatch, PipelineOutcome(history=[PipelineState.IDLE]))

    with pytest.raises(typer.Exit) as exc:
        release_cmd.run(ref="refs/heads/main", event="push")

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)


def test_run_build_failure_exit_code(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import shipyard.cli.commands.release_cmd as release_cmd

    ctx = _ctx(tmp_path)
    monkeypatch.setattr(release_cmd, "build_context", lambda: ctx)
    _patch_pipeline(
        monkeypatch,
        PipelineOutcome(
            state=PipelineState.FAILED,
            failures={"linux": PreconditionError(os_id="linux", returncode=100, detail="E: x")},
        ),
    )

    with pytest.raises(typer.Exit) as exc:
        release_cmd.run(ref="v1.2.0", event="push")

    assert exc.value.exit_code == int(ErrorCode.BUILD_ERROR)
    assert isinstance(ctx.console, MockConsole)
    assert ctx.console.find("[linux] native dependency install failed (exit 100)")
    assert ctx.console.find("no release was created")


def test_run_publish_failure_exit_code(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import shipyard.cli.commands.release_cmd as release_cmd

    monkeypatch.setattr(release_cmd, "build_context", lambda: _ctx(tmp_path))
    _patch_pipeline(
        monkeypatch,
        PipelineOutcome(
            state=PipelineState.FAILED,
            publish_error=ReleaseError(kind="gh_auth_required", message="gh auth required"),
        ),
    )

    with pytest.raises(typer.Exit) as exc:
        release_cmd.run(ref="v1.2.0", event="push")

    assert exc.value.exit_code == int(ErrorCode.ENV_ERROR)


def test_publish_without_artifacts_fails_join(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    import shipyard.cli.commands.release_cmd as release_cmd

    monkeypatch.setattr(release_cmd, "build_context", lambda: _ctx(tmp_path))

    with pytest.raises(typer.Exit) as exc:
        release_cmd.publish(ref="v1.2.0", event="push")

    assert exc.value.exit_code == int(ErrorCode.BUILD_ERROR)


def test_plan_prints_every_command(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import shipyard.cli.commands.release_cmd as release_cmd

    ctx = _ctx(tmp_path)
    monkeypatch.setattr(release_cmd, "build_context", lambda: ctx)

    release_cmd.plan(ref="v1.2.0")

    assert isinstance(ctx.console, MockConsole)
    text = ctx.console.text
    assert "sudo apt update" in text
    assert "cargo build --release --target x86_64-pc-windows-gnu" in text
    assert "rename" in text and "program-windows.exe" in text
    assert "gh release create v1.2.0" in text
    assert "--draft" in text
