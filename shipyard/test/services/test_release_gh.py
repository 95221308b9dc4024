from __future__ import annotations

from pathlib import Path

import pytest

from shipyard.core.result import Err, Ok, Result
from shipyard.platform.process import ProcessError
from shipyard.services.release import gh as gh_mod
from shipyard.services.release.model import ReleaseBundle


def _err(*, stderr: str, returncode: int = 1) -> Err[ProcessError]:
    return Err(
        ProcessError(
            command=("gh", "release", "view"),
            returncode=returncode,
            stdout="",
            stderr=stderr,
        )
    )


def _no_sleep(seconds: float) -> None:
    del seconds


class FakeGh:
    def __init__(self, responses: list[Result[str, ProcessError]]) -> None:
        self.responses = responses
        self.calls: list[list[str]] = []

    def __call__(
        self, cmd: list[str], *, cwd: Path, timeout: float | None = None
    ) -> Result[str, ProcessError]:
        del cwd
        del timeout
        self.calls.append(cmd)
        return self.responses.pop(0)


def _install(monkeypatch: pytest.MonkeyPatch, fake: FakeGh) -> None:
    monkeypatch.setattr(gh_mod, "run_process", fake)
    monkeypatch.setattr(gh_mod, "sleep", _no_sleep)


def _bundle(tmp_path: Path) -> ReleaseBundle:
    files = tuple(
        tmp_path / "artifacts" / d / n
        for d, n in (
            ("linux", "program-linux"),
            ("windows", "program-windows.exe"),
            ("macos", "program-macos"),
        )
    )
    return ReleaseBundle(tag="v1.2.0", files=files)


def test_read_retries_transient_error(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    fake = FakeGh([_err(stderr="HTTP 503 Service Unavailable"), Ok("ok")])
    _install(monkeypatch, fake)

    result = gh_mod.run_gh_read(project_root=tmp_path, cmd=["gh", "auth", "status"])

    assert result == Ok("ok")
    assert len(fake.calls) == 2


def test_read_gives_up_after_attempts(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    fake = FakeGh([_err(stderr="connection reset by peer") for _ in range(3)])
    _install(monkeypatch, fake)

    result = gh_mod.run_gh_read(project_root=tmp_path, cmd=["gh", "auth", "status"])

    assert isinstance(result, Err)
    assert len(fake.calls) == 3


def test_read_does_not_retry_non_transient(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    fake = FakeGh([_err(stderr="HTTP 401 Bad credentials"), Ok("unused")])
    _install(monkeypatch, fake)

    result = gh_mod.run_gh_read(project_root=tmp_path, cmd=["gh", "auth", "status"])

    assert isinstance(result, Err)
    assert len(fake.calls) == 1


def test_release_exists_true(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    fake = FakeGh([Ok('{"tagName": "v1.2.0"}')])
    _install(monkeypatch, fake)

    result = gh_mod.release_exists(project_root=tmp_path, repo="acme/kza", tag="v1.2.0")

    assert result == Ok(True)
    assert fake.calls[0] == [
        "gh", "release", "view", "v1.2.0", "--repo", "acme/kza", "--json", "tagName",
    ]


def test_release_exists_false_on_not_found(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    _install(monkeypatch, FakeGh([_err(stderr="release not found")]))

    result = gh_mod.release_exists(project_root=tmp_path, repo=None, tag="v1.2.0")
    assert result == Ok(False)


def test_release_exists_other_error(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _install(monkeypatch, FakeGh([_err(stderr="HTTP 403 Forbidden")]))

    result = gh_mod.release_exists(project_root=tmp_path, repo=None, tag="v1.2.0")
    assert isinstance(result, Err)
    assert result.error.kind == "publish_failed"


def test_create_command_is_a_draft_with_generated_notes(tmp_path: Path) -> None:
    bundle = _bundle(tmp_path)

    cmd = gh_mod.create_release_command(bundle, repo=None)

    assert cmd[:4] == ["gh", "release", "create", "v1.2.0"]
    assert cmd[4:7] == [str(p) for p in bundle.files]
    assert "--draft" in cmd
    assert "--generate-notes" in cmd
    assert "--verify-tag" in cmd
    assert "--prerelease" not in cmd
    assert "--repo" not in cmd


def test_create_command_with_repo(tmp_path: Path) -> None:
    cmd = gh_mod.create_release_command(_bundle(tmp_path), repo="acme/kza")
    i = cmd.index("--repo")
    assert cmd[i + 1] == "acme/kza"


def test_create_returns_url(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    url = "https://github.com/acme/kza/releases/tag/untagged-1"
    _install(monkeypatch, FakeGh([Ok(f"{url}\n")]))

    result = gh_mod.create_release(project_root=tmp_path, repo=None, bundle=_bundle(tmp_path))
    assert result == Ok(url)


def test_create_is_never_retried(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    fake = FakeGh([_err(stderr="HTTP 502 Bad Gateway"), Ok("unused")])
    _install(monkeypatch, fake)

    result = gh_mod.create_release(project_root=tmp_path, repo=None, bundle=_bundle(tmp_path))

    assert isinstance(result, Err)
    assert result.error.kind == "publish_failed"
    assert len(fake.calls) == 1


def test_auth_failure_maps_to_auth_required(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    _install(monkeypatch, FakeGh([_err(stderr="You are not logged into any GitHub hosts")]))

    result = gh_mod.ensure_gh_auth(project_root=tmp_path)
    assert isinstance(result, Err)
    assert result.error.kind == "gh_auth_required"


def test_gh_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(gh_mod.shutil, "which", lambda _name: None)

    result = gh_mod.ensure_gh_available()
    assert isinstance(result, Err)
    assert result.error.kind == "gh_missing"


def test_release_exists_unreachable_after_retries(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    fake = FakeGh([_err(stderr="HTTP 502 Bad Gateway") for _ in range(3)])
    _install(monkeypatch, fake)

    result = gh_mod.release_exists(project_root=tmp_path, repo=None, tag="v1.2.0")

    assert isinstance(result, Err)
    assert result.error.kind == "gh_unreachable"
    assert len(fake.calls) == 3
