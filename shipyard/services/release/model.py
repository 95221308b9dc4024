from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path

_TAG_REF_PREFIX = "refs/tags/"


@dataclass(frozen=True, slots=True)
class Trigger:
    """The VCS event a pipeline run reacts to.

    Mirrors the hosting CI's event name and ref, e.g. ("push", "refs/tags/v1.2.0").
    """

    event: str
    ref: str

    @classmethod
    def from_env(cls, *, event: str | None = None, ref: str | None = None) -> Trigger:
        """Build from explicit values, falling back to GITHUB_EVENT_NAME / GITHUB_REF."""
        return cls(
            event=event or os.environ.get("GITHUB_EVENT_NAME") or "push",
            ref=ref or os.environ.get("GITHUB_REF") or "",
        )

    @property
    def is_tag(self) -> bool:
        return self.ref.startswith(_TAG_REF_PREFIX)

    @property
    def tag(self) -> str | None:
        if not self.is_tag:
            return None
        return self.ref.removeprefix(_TAG_REF_PREFIX) or None

    def is_release_trigger(self, tag_pattern: str) -> bool:
        """Only a tag push matching the pattern starts a release."""
        tag = self.tag
        if self.event != "push" or tag is None:
            return False
        return fnmatchcase(tag, tag_pattern)


def normalize_ref(value: str) -> str:
    """Accept a bare tag ("v1.2.0") or a full ref ("refs/tags/v1.2.0")."""
    v = value.strip()
    if not v or v.startswith("refs/"):
        return v
    return f"{_TAG_REF_PREFIX}{v}"


@dataclass(frozen=True, slots=True)
class ReleaseBundle:
    """Everything one `gh release create` call needs.

    draft/prerelease are fixed: a maintainer promotes the draft by hand.
    """

    tag: str
    files: tuple[Path, ...]
    draft: bool = True
    prerelease: bool = False
    generate_notes: bool = True


@dataclass(frozen=True, slots=True)
class PublishedRelease:
    tag: str
    url: str
    files: tuple[Path, ...]
