"""Filesystem helpers."""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path

__all__ = ["write_script"]

_EXECUTABLE_MODE = stat.S_IRWXU | stat.S_IRGRP | stat.S_IXGRP | stat.S_IROTH | stat.S_IXOTH


def write_script(path: Path, content: str, *, executable: bool = True) -> None:
    """Replace `path` with `content` in one step, optionally chmod 755.

    Readers (git running a hook) see either the old file or the new one.
    Git skips hooks without the executable bit on Unix.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        newline="\n",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    ) as tmp:
        staged = Path(tmp.name)
        tmp.write(content)

    try:
        if executable:
            staged.chmod(_EXECUTABLE_MODE)
        os.replace(staged, path)
    except OSError:
        staged.unlink(missing_ok=True)
        raise
