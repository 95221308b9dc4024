"""Release Publisher: the fan-in consumer.

It does nothing until the store's join succeeds for all three keys, then
lays the artifacts out as `<download_dir>/<os_id>/<artifact file>`, checks
that this is exactly the expected file list, and creates one draft release.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from shipyard.core.project import Project
from shipyard.core.result import Err, Ok, Result
from shipyard.output.console import ConsoleProtocol, Style
from shipyard.services.artifact_store import ArtifactStore
from shipyard.services.release import gh
from shipyard.services.release.errors import ReleaseError
from shipyard.services.release.model import PublishedRelease, ReleaseBundle, Trigger
from shipyard.services.targets import TARGETS, artifact_key, expected_release_files

REQUIRED_FILE_COUNT = len(TARGETS)


def build_bundle(tag: str, files: tuple[Path, ...]) -> Result[ReleaseBundle, ReleaseError]:
    """Validate the file list and wrap it in a draft bundle.

    A bundle always carries one distinct, non-empty file per target.
    """
    if len(files) != REQUIRED_FILE_COUNT:
        return Err(
            ReleaseError(
                kind="incomplete_bundle",
                message=f"expected {REQUIRED_FILE_COUNT} files, got {len(files)}",
            )
        )

    if len({p.resolve() for p in files}) != len(files):
        return Err(ReleaseError(kind="incomplete_bundle", message="duplicate files in bundle"))

    for path in files:
        if not path.is_file():
            return Err(ReleaseError(kind="missing_file", message=f"file not found: {path}"))
        if path.stat().st_size == 0:
            return Err(ReleaseError(kind="incomplete_bundle", message=f"empty file: {path}"))

    return Ok(ReleaseBundle(tag=tag, files=files))


class ReleasePublisher:
    def __init__(self, *, project: Project, console: ConsoleProtocol) -> None:
        self._project = project
        self._console = console

    @property
    def expected_files(self) -> tuple[Path, ...]:
        return expected_release_files(self._project.download_dir, self._project.program)

    def check_trigger(self, trigger: Trigger) -> Result[str, ReleaseError]:
        """Return the tag if `trigger` may create a release."""
        pattern = self._project.config.release.tag_pattern
        tag = trigger.tag
        if tag is None or not trigger.is_release_trigger(pattern):
            return Err(
                ReleaseError(
                    kind="not_a_tag",
                    message=f"not a release trigger: {trigger.event} {trigger.ref or '(no ref)'}",
                    hint=f"Releases are created only by pushing a tag matching '{pattern}'",
                )
            )
        return Ok(tag)

    def retrieve(self, store: ArtifactStore) -> Result[tuple[Path, ...], ReleaseError]:
        """Wait for all keys, then copy each artifact into its platform directory."""
        program = self._project.program
        keys = tuple(artifact_key(program, t) for t in TARGETS)

        joined = store.get_all(keys)
        if isinstance(joined, Err):
            return Err(
                ReleaseError(
                    kind="join_failed",
                    message="not all platform builds delivered an artifact",
                    hint=str(joined.error),
                )
            )

        retrieved: list[Path] = []
        for target in TARGETS:
            src = joined.value[artifact_key(program, target)]
            dest_dir = self._project.download_dir / target.os_id
            dest = dest_dir / src.name
            try:
                if dest_dir.exists():
                    shutil.rmtree(dest_dir)
                dest_dir.mkdir(parents=True)
                shutil.copy2(src, dest)
            except OSError as e:
                return Err(
                    ReleaseError(
                        kind="missing_file",
                        message=f"failed to retrieve {artifact_key(program, target)}",
                        hint=str(e),
                    )
                )
            retrieved.append(dest)

        expected = self.expected_files
        if tuple(retrieved) != expected:
            mismatched = [str(p) for p in expected if p not in retrieved]
            return Err(
                ReleaseError(
                    kind="missing_file",
                    message="retrieved artifacts do not match the release file list",
                    hint=", ".join(mismatched) or None,
                )
            )

        return Ok(tuple(retrieved))

    def preflight(self, tag: str) -> Result[None, ReleaseError]:
        available = gh.ensure_gh_available()
        if isinstance(available, Err):
            return available

        auth = gh.ensure_gh_auth(project_root=self._project.root)
        if isinstance(auth, Err):
            return auth

        exists = gh.release_exists(
            project_root=self._project.root,
            repo=self._project.config.project.repo,
            tag=tag,
        )
        if isinstance(exists, Err):
            return exists
        if exists.value:
            return Err(
                ReleaseError(
                    kind="release_exists",
                    message=f"release already exists: {tag}",
                    hint="Delete the release and re-push the tag to publish again",
                )
            )
        return Ok(None)

    def plan(self, tag: str) -> list[str]:
        """The create command this publisher would run for `tag`."""
        bundle = ReleaseBundle(tag=tag, files=self.expected_files)
        return gh.create_release_command(bundle, repo=self._project.config.project.repo)

    def publish(
        self, trigger: Trigger, store: ArtifactStore
    ) -> Result[PublishedRelease, ReleaseError]:
        """Guard, join, validate, then create the draft release."""
        tag_result = self.check_trigger(trigger)
        if isinstance(tag_result, Err):
            return tag_result
        tag = tag_result.value

        files = self.retrieve(store)
        if isinstance(files, Err):
            return files

        bundle = build_bundle(tag, files.value)
        if isinstance(bundle, Err):
            return bundle

        pre = self.preflight(tag)
        if isinstance(pre, Err):
            return pre

        cmd = gh.create_release_command(bundle.value, repo=self._project.config.project.repo)
        self._console.print(" ".join(cmd[:4]) + " ...", Style.DIM)
        for path in bundle.value.files:
            self._console.print(f"  {path.name}", Style.DIM)

        created = gh.create_release(
            project_root=self._project.root,
            repo=self._project.config.project.repo,
            bundle=bundle.value,
        )
        if isinstance(created, Err):
            return created

        self._console.success(f"draft release {tag}: {created.value or '(no url)'}")
        return Ok(PublishedRelease(tag=tag, url=created.value, files=bundle.value.files))
