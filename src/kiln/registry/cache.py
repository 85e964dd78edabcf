import json
import logging
import os
import shutil
import tempfile
import threading
import time
from datetime import timedelta
from pathlib import Path
from typing import Callable, Dict, List, Optional, Protocol

logger = logging.getLogger(__name__)

DEFAULT_FRESH_DURATION = timedelta(hours=24)

# shared by every VersionCache in the process, keyed by cache key
_key_locks: Dict[str, threading.Lock] = {}
_key_locks_guard = threading.Lock()


def _lock_for(key: str) -> threading.Lock:
    with _key_locks_guard:
        lock = _key_locks.get(key)
        if lock is None:
            lock = _key_locks[key] = threading.Lock()
        return lock


class CacheStore(Protocol):
    """keyed persistence for resolved version lists."""

    def read(self, key: str) -> Optional[List[str]]:
        """return the stored list, or None when absent or no longer valid."""
        ...

    def write(self, key: str, versions: List[str]) -> None:
        ...

    def clear(self, key: Optional[str] = None) -> None:
        ...


class FileCacheStore:
    """stores each key as <cache_dir>/<key>/remote_versions.json."""

    FILE_NAME = "remote_versions.json"

    def __init__(self, cache_dir: Path, fresh_duration: Optional[timedelta] = DEFAULT_FRESH_DURATION):
        self.cache_dir = cache_dir
        self.fresh_duration = fresh_duration

    def path_for(self, key: str) -> Path:
        return self.cache_dir / key / self.FILE_NAME

    def _is_fresh(self, path: Path) -> bool:
        if self.fresh_duration is None:
            return True
        age = time.time() - path.stat().st_mtime
        return age < self.fresh_duration.total_seconds()

    def read(self, key: str) -> Optional[List[str]]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            if not self._is_fresh(path):
                logger.debug(f"cache entry {path} is stale")
                return None
            with open(path, "r") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            # unreadable entries are recomputed
            logger.debug(f"ignoring unreadable cache entry {path}: {e}")
            return None
        if not isinstance(data, list) or not all(isinstance(v, str) for v in data):
            logger.debug(f"ignoring malformed cache entry {path}")
            return None
        return data

    def write(self, key: str, versions: List[str]) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)

        # write to a sibling temp file, then rename over the target
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".remote_versions-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(versions, f)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def clear(self, key: Optional[str] = None) -> None:
        target = self.cache_dir / key if key else self.cache_dir
        if target.exists():
            shutil.rmtree(target)


class VersionCache:
    """
    compute-if-absent cache of remote version lists.

    within one process a key is computed at most once at a time, across all
    VersionCache instances: concurrent callers for the same key block on a
    process-wide per-key lock and then read the result the first caller
    stored. failed computations store nothing.
    """

    def __init__(self, store: CacheStore):
        self.store = store
        self._memo: Dict[str, List[str]] = {}
        self._memo_guard = threading.Lock()

    def get_or_compute(self, key: str, compute: Callable[[], List[str]]) -> List[str]:
        cached = self._memo.get(key)
        if cached is not None:
            return list(cached)

        with _lock_for(key):
            # another caller may have finished while we waited
            cached = self._memo.get(key)
            if cached is not None:
                return list(cached)

            stored = self.store.read(key)
            if stored is not None:
                logger.debug(f"version cache hit: {key}")
                self._memo[key] = stored
                return list(stored)

            logger.debug(f"version cache miss: {key}")
            versions = list(compute())
            self.store.write(key, versions)
            self._memo[key] = versions
            return list(versions)

    def invalidate(self, key: Optional[str] = None) -> None:
        """drop in-memory and persisted entries (one key, or everything)."""
        with self._memo_guard:
            if key is None:
                self._memo.clear()
            else:
                self._memo.pop(key, None)
        self.store.clear(key)
