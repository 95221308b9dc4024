from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "gh_missing",
    "gh_auth_required",
    "not_a_tag",
    "release_exists",
    "missing_file",
    "incomplete_bundle",
    "join_failed",
    "publish_failed",
    "gh_unreachable",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    kind: ReleaseErrorKind
    message: str
    hint: str | None = None
