"""Durable key-value storage for collection snapshots.

Two backends share one contract: ``load(key)`` returns the stored bytes
or ``None`` for a key never written; ``save(key, value)`` writes the
whole value. Either raises :class:`PersistenceFailure` when the backend
rejects the operation. Both enforce an optional total-capacity
quota so a browser-sized storage budget can be modelled.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from storehub.errors import PersistenceFailure

logger = logging.getLogger(__name__)

_SAFE_KEY_RE = re.compile(r"[^A-Za-z0-9_.-]")


class KeyValueStore(ABC):
    """Save a named blob, load a named blob."""

    def __init__(self, capacity_bytes: int = 0) -> None:
        self.capacity_bytes = capacity_bytes

    @abstractmethod
    def load(self, key: str) -> bytes | None:
        """Return the stored value, or None if the key was never written.

        Raises PersistenceFailure if the value exists but cannot be read.
        """

    @abstractmethod
    def save(self, key: str, value: bytes) -> None:
        """Replace the stored value. Raises PersistenceFailure on rejection."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key. Missing keys are ignored."""

    @abstractmethod
    def usage(self, exclude: str | None = None) -> int:
        """Total bytes currently stored, optionally ignoring one key."""

    def _check_quota(self, key: str, value: bytes) -> None:
        if not self.capacity_bytes:
            return
        projected = self.usage(exclude=key) + len(value)
        if projected > self.capacity_bytes:
            raise PersistenceFailure(
                key, f"quota exceeded ({projected} > {self.capacity_bytes} bytes)"
            )


class MemoryKeyValueStore(KeyValueStore):
    """In-process store. Survives store re-instantiation only if shared."""

    def __init__(self, capacity_bytes: int = 0) -> None:
        super().__init__(capacity_bytes)
        self._data: dict[str, bytes] = {}

    def load(self, key: str) -> bytes | None:
        return self._data.get(key)

    def save(self, key: str, value: bytes) -> None:
        self._check_quota(key, value)
        self._data[key] = bytes(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def usage(self, exclude: str | None = None) -> int:
        return sum(len(v) for k, v in self._data.items() if k != exclude)

    def keys(self) -> list[str]:
        return sorted(self._data)


class FileKeyValueStore(KeyValueStore):
    """One file per key under a data directory.

    Writes go to a temp file in the same directory and are moved into
    place with ``os.replace``, so a reader sees either the old snapshot
    or the new one.
    """

    SUFFIX = ".json"

    def __init__(self, directory: Path, capacity_bytes: int = 0) -> None:
        super().__init__(capacity_bytes)
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{_SAFE_KEY_RE.sub('_', key)}{self.SUFFIX}"

    def load(self, key: str) -> bytes | None:
        path = self._path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise PersistenceFailure(key, f"unreadable: {exc}") from exc

    def save(self, key: str, value: bytes) -> None:
        self._check_quota(key, value)
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".tmp-", suffix=self.SUFFIX)
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(value)
                os.replace(tmp_name, path)
                logger.debug("Wrote %d bytes to %s", len(value), path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise PersistenceFailure(key, str(exc)) from exc

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as exc:
            raise PersistenceFailure(key, str(exc)) from exc

    def usage(self, exclude: str | None = None) -> int:
        if not self.directory.exists():
            return 0
        skip = self._path(exclude).name if exclude is not None else None
        return sum(
            p.stat().st_size
            for p in self.directory.glob(f"*{self.SUFFIX}")
            if not p.name.startswith(".tmp-") and p.name != skip
        )
