from __future__ import annotations

import shutil
from pathlib import Path
from time import sleep

from shipyard.core.result import Err, Ok, Result
from shipyard.platform.process import ProcessError
from shipyard.platform.process import run as run_process
from shipyard.services.release.errors import ReleaseError
from shipyard.services.release.model import ReleaseBundle
from shipyard.services.release.timeouts import (
    GH_CREATE_TIMEOUT_SECONDS,
    GH_READ_RETRY_ATTEMPTS,
    GH_READ_RETRY_DELAY_SECONDS,
    GH_TIMEOUT_SECONDS,
)


def _is_transient_gh_error(error: ProcessError) -> bool:
    text = f"{error.stderr}\n{error.stdout}".lower()
    markers = (
        "timed out",
        "timeout",
        "connection reset",
        "connection refused",
        "temporarily unavailable",
        "service unavailable",
        "bad gateway",
        "gateway timeout",
        "tls handshake timeout",
        "network is unreachable",
        "http 429",
        "http 500",
        "http 502",
        "http 503",
        "http 504",
    )
    if error.returncode == -1 and "timed out" in text:
        return True
    return any(marker in text for marker in markers)


def _is_not_found(error: ProcessError) -> bool:
    text = f"{error.stderr}\n{error.stdout}".lower()
    return "release not found" in text or "http 404" in text


def _unreachable(error: ProcessError) -> ReleaseError:
    return ReleaseError(
        kind="gh_unreachable",
        message="GitHub is unreachable",
        hint=error.stderr_tail(lines=3) or None,
    )


def _repo_args(repo: str | None) -> list[str]:
    return ["--repo", repo] if repo else []


def run_gh_read(
    *,
    project_root: Path,
    cmd: list[str],
    timeout: float = GH_TIMEOUT_SECONDS,
    retry_attempts: int = GH_READ_RETRY_ATTEMPTS,
) -> Result[str, ProcessError]:
    """Run an idempotent gh command, retrying transient network failures."""
    attempts = max(1, retry_attempts)
    result: Result[str, ProcessError] = Err(ProcessError(tuple(cmd), -1, "", "not run"))
    for attempt in range(attempts):
        result = run_process(cmd, cwd=project_root, timeout=timeout)
        if isinstance(result, Ok):
            return result
        if attempt < attempts - 1 and _is_transient_gh_error(result.error):
            sleep(GH_READ_RETRY_DELAY_SECONDS * (attempt + 1))
            continue
        return result
    return result


def ensure_gh_available() -> Result[None, ReleaseError]:
    if shutil.which("gh") is None:
        return Err(
            ReleaseError(
                kind="gh_missing",
                message="gh: missing",
                hint="Install GitHub CLI: https://cli.github.com/",
            )
        )
    return Ok(None)


def ensure_gh_auth(*, project_root: Path) -> Result[None, ReleaseError]:
    result = run_gh_read(project_root=project_root, cmd=["gh", "auth", "status"])
    if isinstance(result, Err):
        if _is_transient_gh_error(result.error):
            return Err(_unreachable(result.error))
        return Err(
            ReleaseError(
                kind="gh_auth_required",
                message="gh auth required",
                hint="Run: gh auth login (or set GH_TOKEN / GITHUB_TOKEN)",
            )
        )
    return Ok(None)


def release_exists(*, project_root: Path, repo: str | None, tag: str) -> Result[bool, ReleaseError]:
    cmd = ["gh", "release", "view", tag, *_repo_args(repo), "--json", "tagName"]
    result = run_gh_read(project_root=project_root, cmd=cmd)
    if isinstance(result, Ok):
        return Ok(True)
    if _is_not_found(result.error):
        return Ok(False)
    if _is_transient_gh_error(result.error):
        return Err(_unreachable(result.error))
    return Err(
        ReleaseError(
            kind="publish_failed",
            message=f"failed to query release: {tag}",
            hint=result.error.stderr.strip() or None,
        )
    )


def create_release_command(bundle: ReleaseBundle, *, repo: str | None) -> list[str]:
    cmd = ["gh", "release", "create", bundle.tag, *(str(p) for p in bundle.files)]
    cmd.extend(_repo_args(repo))
    cmd.extend(["--title", bundle.tag, "--verify-tag"])
    if bundle.draft:
        cmd.append("--draft")
    if bundle.prerelease:
        cmd.append("--prerelease")
    if bundle.generate_notes:
        cmd.append("--generate-notes")
    return cmd


def create_release(
    *,
    project_root: Path,
    repo: str | None,
    bundle: ReleaseBundle,
) -> Result[str, ReleaseError]:
    """Create the release and upload its files. Returns the release URL.

    Not retried: a half-finished create can leave a draft with partial
    assets behind, which a human must inspect.
    """
    cmd = create_release_command(bundle, repo=repo)
    result = run_process(cmd, cwd=project_root, timeout=GH_CREATE_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        e = result.error
        return Err(
            ReleaseError(
                kind="publish_failed",
                message=f"failed to create release: {bundle.tag}",
                hint=e.stderr.strip() or str(e),
            )
        )

    lines = result.value.strip().splitlines()
    url = lines[-1].strip() if lines else ""
    return Ok(url)
