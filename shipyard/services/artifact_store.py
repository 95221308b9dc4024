"""Write-once artifact store scoped to one pipeline run.

Builders put their renamed binary under `<program>-<os_id>`; the publisher
calls get_all() and blocks until every key is present. That call is the
pipeline's only join point:

- a producer that fails calls abandon(), and get_all() returns JoinError
  instead of waiting forever
- a store that other processes populated (CI matrix jobs) is opened with
  open_sealed(); get_all() then answers immediately

Layout on disk: `<root>/<key>/<file name>`. A key directory is claimed with
mkdir, so a second put for the same key fails even across processes.
"""

from __future__ import annotations

import os
import shutil
import threading
from dataclasses import dataclass
from pathlib import Path

from shipyard.core.result import Err, Ok, Result
from shipyard.services.build_errors import DuplicateArtifactError, StoreWriteError

__all__ = ["ArtifactStore", "JoinError"]

_PARTIAL_SUFFIX = ".partial"


@dataclass(frozen=True, slots=True)
class JoinError:
    """get_all() cannot complete.

    Attributes:
        missing: Requested keys never delivered
        abandoned: (key, reason) for producers that reported failure
    """

    missing: tuple[str, ...]
    abandoned: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        parts: list[str] = []
        if self.abandoned:
            parts.append("failed: " + ", ".join(f"{k} ({r})" for k, r in self.abandoned))
        if self.missing:
            parts.append("missing: " + ", ".join(self.missing))
        return "; ".join(parts) or "join failed"


class ArtifactStore:
    """Keyed blob store with a blocking, all-or-nothing read."""

    def __init__(self, root: Path) -> None:
        self._root = root
        self._cond = threading.Condition()
        self._entries: dict[str, Path] = {}
        self._abandoned: dict[str, str] = {}
        self._sealed = False

    @classmethod
    def open_sealed(cls, root: Path) -> ArtifactStore:
        """Open a store populated by other processes; no further puts."""
        store = cls(root)
        store._load_from_disk()
        store.seal()
        return store

    @property
    def root(self) -> Path:
        return self._root

    def keys(self) -> tuple[str, ...]:
        with self._cond:
            return tuple(sorted(self._entries))

    def reset(self) -> None:
        """Start a fresh run: drop every entry and the files behind them."""
        with self._cond:
            if self._root.exists():
                shutil.rmtree(self._root)
            self._entries.clear()
            self._abandoned.clear()
            self._sealed = False

    def put(self, key: str, file: Path) -> Result[Path, DuplicateArtifactError | StoreWriteError]:
        """Store a copy of `file` under `key`.

        Returns:
            Ok(stored path), Err(DuplicateArtifactError) if the key already has
            a value, Err(StoreWriteError) on I/O failure or a sealed store.
        """
        with self._cond:
            if self._sealed:
                return Err(StoreWriteError(key=key, reason="store is sealed"))
            if key in self._entries:
                return Err(DuplicateArtifactError(key=key))

            key_dir = self._root / key
            try:
                self._root.mkdir(parents=True, exist_ok=True)
                key_dir.mkdir()
            except FileExistsError:
                return Err(DuplicateArtifactError(key=key))
            except OSError as e:
                return Err(StoreWriteError(key=key, reason=str(e)))

            dest = key_dir / file.name
            partial = key_dir / f"{file.name}{_PARTIAL_SUFFIX}"
            try:
                shutil.copy2(file, partial)
                os.replace(partial, dest)
            except OSError as e:
                shutil.rmtree(key_dir, ignore_errors=True)
                return Err(StoreWriteError(key=key, reason=str(e)))

            self._entries[key] = dest
            self._cond.notify_all()
            return Ok(dest)

    def abandon(self, key: str, reason: str) -> None:
        """Record that `key` will never be delivered in this run."""
        with self._cond:
            self._abandoned[key] = reason
            self._cond.notify_all()

    def seal(self) -> None:
        """Refuse further puts and wake any waiter on missing keys."""
        with self._cond:
            self._sealed = True
            self._cond.notify_all()

    def discard(self) -> None:
        """Drop everything after a failed run; partial coverage is never kept."""
        with self._cond:
            if self._root.exists():
                shutil.rmtree(self._root)
            self._entries.clear()
            self._sealed = True
            self._cond.notify_all()

    def get_all(self, keys: tuple[str, ...]) -> Result[dict[str, Path], JoinError]:
        """Block until every key is present.

        Returns Err(JoinError) as soon as a requested key is abandoned, or when
        the store is sealed with keys still missing. There is no timeout.
        """
        with self._cond:
            while True:
                abandoned = tuple((k, self._abandoned[k]) for k in keys if k in self._abandoned)
                missing = tuple(k for k in keys if k not in self._entries)
                if abandoned:
                    return Err(JoinError(missing=missing, abandoned=abandoned))
                if not missing:
                    return Ok({k: self._entries[k] for k in keys})
                if self._sealed:
                    return Err(JoinError(missing=missing))
                self._cond.wait()

    def _load_from_disk(self) -> None:
        with self._cond:
            if not self._root.is_dir():
                return
            for key_dir in sorted(self._root.iterdir()):
                if not key_dir.is_dir():
                    continue
                files = [
                    p
                    for p in key_dir.iterdir()
                    if p.is_file() and not p.name.endswith(_PARTIAL_SUFFIX)
                ]
                # A key holds exactly one blob; anything else is not ours.
                if len(files) == 1:
                    self._entries[key_dir.name] = files[0]
