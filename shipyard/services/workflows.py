"""GitHub Actions workflows that drive shipyard across runners.

release.yml runs one `shipyard build --target <os_id>` job per platform on
its native runner. Each job uploads its store key directory. The release job
merges those directories back into one store and runs `shipyard release
publish`, which opens the store sealed and joins on all three keys.
ci.yml runs `shipyard ci` on pushes and pull requests to main.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from shipyard.core.config import Config
from shipyard.core.result import Err, Ok, Result
from shipyard.platform.files import write_script
from shipyard.services.targets import TARGETS

WORKFLOW_MARKER = "# managed by shipyard"
PYTHON_VERSION = "3.12"
PACKAGE_NAME = "shipyard-release"

_RUNNERS = {
    "linux": "ubuntu-latest",
    "windows": "windows-latest",
    "macos": "macos-latest",
}


@dataclass(frozen=True, slots=True)
class WorkflowError:
    message: str
    hint: str | None = None


def _setup_steps(*, targets: str | None, components: str | None = None) -> str:
    rust_with = ""
    if targets or components:
        rust_with = "        with:\n"
        if targets:
            rust_with += f"          targets: {targets}\n"
        if components:
            rust_with += f"          components: {components}\n"
    return (
        "      - uses: actions/checkout@v4\n"
        "      - uses: actions/setup-python@v5\n"
        "        with:\n"
        f'          python-version: "{PYTHON_VERSION}"\n'
        f"      - run: python -m pip install {PACKAGE_NAME}\n"
        "      - uses: dtolnay/rust-toolchain@stable\n"
        f"{rust_with}"
    )


def release_workflow(config: Config) -> str:
    """Tag-triggered build matrix plus the fan-in publish job."""
    store_dir = config.release.store_dir
    tag_pattern = config.release.tag_pattern
    include = "".join(
        f"          - os: {_RUNNERS[t.os_id]}\n"
        f"            os_id: {t.os_id}\n"
        f"            triple: {t.triple}\n"
        for t in TARGETS
    )
    runners = ", ".join(_RUNNERS[t.os_id] for t in TARGETS)
    build_setup = _setup_steps(targets="${{ matrix.triple }}")
    return (
        f"{WORKFLOW_MARKER}\n"
        "name: Release\n"
        "on:\n"
        "  push:\n"
        "    tags:\n"
        f'      - "{tag_pattern}"\n'
        "jobs:\n"
        "  build:\n"
        "    runs-on: ${{ matrix.os }}\n"
        "    strategy:\n"
        "      matrix:\n"
        f"        os: [{runners}]\n"
        "        include:\n"
        f"{include}"
        "    steps:\n"
        f"{build_setup}"
        "      - run: shipyard build --target ${{ matrix.os_id }} --reset-store\n"
        "      - uses: actions/upload-artifact@v4\n"
        "        with:\n"
        "          name: shipyard-store-${{ matrix.os_id }}\n"
        f"          path: {store_dir}/\n"
        "          if-no-files-found: error\n"
        "  release:\n"
        "    needs: build\n"
        "    runs-on: ubuntu-latest\n"
        "    permissions:\n"
        "      contents: write\n"
        "    steps:\n"
        "      - uses: actions/checkout@v4\n"
        "      - uses: actions/setup-python@v5\n"
        "        with:\n"
        f'          python-version: "{PYTHON_VERSION}"\n'
        f"      - run: python -m pip install {PACKAGE_NAME}\n"
        "      - uses: actions/download-artifact@v4\n"
        "        with:\n"
        "          pattern: shipyard-store-*\n"
        f"          path: {store_dir}\n"
        "          merge-multiple: true\n"
        "      - run: shipyard release publish\n"
        "        env:\n"
        "          GH_TOKEN: ${{ secrets.GITHUB_TOKEN }}\n"
    )


def ci_workflow() -> str:
    """Push and pull request gate on main."""
    return (
        f"{WORKFLOW_MARKER}\n"
        "name: CI\n"
        "on:\n"
        "  push:\n"
        "    branches:\n"
        "      - main\n"
        "  pull_request:\n"
        "    branches:\n"
        "      - main\n"
        "jobs:\n"
        "  check:\n"
        "    runs-on: ubuntu-latest\n"
        "    steps:\n"
        f"{_setup_steps(targets=None, components='clippy, rustfmt')}"
        "      - run: shipyard ci\n"
    )


def _is_managed(path: Path) -> bool:
    try:
        return WORKFLOW_MARKER in path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return False


def install_workflows(
    project_root: Path, config: Config, *, force: bool = False
) -> Result[list[Path], WorkflowError]:
    """Write release.yml and ci.yml into `<project_root>/.github/workflows`.

    Workflows not written by shipyard are left alone unless `force` is set.
    """
    workflows_dir = project_root / ".github" / "workflows"
    contents = {
        "release.yml": release_workflow(config),
        "ci.yml": ci_workflow(),
    }

    written: list[Path] = []
    for name, text in contents.items():
        path = workflows_dir / name
        if path.exists() and not force and not _is_managed(path):
            return Err(
                WorkflowError(
                    message=f"refusing to overwrite existing workflow: {path}",
                    hint="Re-run with --force to replace it",
                )
            )
        try:
            write_script(path, text, executable=False)
        except OSError as e:
            return Err(WorkflowError(message=f"failed to write {path}: {e}"))
        written.append(path)

    return Ok(written)
