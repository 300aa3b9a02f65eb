from __future__ import annotations

import contextlib
import threading
from pathlib import Path
from typing import Iterator


class PathLockRegistry:
    """
    Provides a stable lock per normalized file path.

    Each collection file gets its own lock, so writers to different files never
    wait on each other while a read-modify-write cycle on one file is exclusive.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def lock_for(self, path: Path) -> threading.Lock:
        key = str(path.resolve())
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    @contextlib.contextmanager
    def exclusive(self, path: Path) -> Iterator[None]:
        """Hold the path's lock for the body of a `with` block, released on any exit."""
        lock = self.lock_for(path)
        with lock:
            yield


GLOBAL_PATH_LOCKS = PathLockRegistry()
