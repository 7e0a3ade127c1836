"""
Header content fingerprints.

Fingerprints are content digests used by the checker to tell whether two
copies of a header differ. They are computed lazily, at most once per
(directory, header path), and memoized so batch checks over many targets do
not re-hash the shared generic directories.

An optional JSON file persists digests between runs. Entries are keyed by
absolute file path and invalidated when the file's size or mtime changes.
The file is shared between concurrent processes, so reads and writes happen
under a file lock.
"""

import json
import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Optional, Tuple

from filelock import FileLock, Timeout

from headerkit.core.exceptions import FingerprintCacheLockTimeout
from headerkit.core.filesystem import atomic_write
from headerkit.core.verification import compute_file_hash
from headerkit.index.tree import HeaderDirectory

logger = logging.getLogger(__name__)

CACHE_FORMAT_VERSION = 1


class FingerprintCache:
    """
    Memoizing fingerprint source, optionally backed by a JSON file.

    Example:
        >>> with FingerprintCache(Path(".headerkit/fingerprints.json")) as cache:
        ...     cache.fingerprint(index["generic-glibc"], "bits/link_lavcurrent.h")
    """

    def __init__(
        self,
        cache_file: Optional[Path] = None,
        algorithm: str = "sha256",
        lock_timeout: int = 30,
    ):
        """
        Initialize fingerprint cache.

        Args:
            cache_file: Optional JSON file persisting digests between runs
            algorithm: Digest algorithm passed to compute_file_hash
            lock_timeout: Timeout in seconds for the cache file lock
        """
        self.cache_file = Path(cache_file) if cache_file else None
        self.algorithm = algorithm
        self.lock_timeout = lock_timeout
        self._memo: Dict[Tuple[Path, str], str] = {}
        self._persisted: Dict[str, dict] = {}
        self._dirty = False
        self._key_locks: Dict[Tuple[Path, str], threading.Lock] = {}
        self._lock = threading.Lock()

    def __enter__(self) -> "FingerprintCache":
        self.load()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.save()

    def __len__(self) -> int:
        return len(self._memo)

    def fingerprint(self, directory: HeaderDirectory, header: str) -> str:
        """
        Digest of one header file.

        Args:
            directory: Directory providing the header
            header: Relative header path

        Returns:
            Hex digest of the file bytes

        Raises:
            FileNotFoundError: If the header file no longer exists
        """
        key = (directory.path, header)
        with self._lock:
            cached = self._memo.get(key)
            if cached is not None:
                return cached
            key_lock = self._key_locks.setdefault(key, threading.Lock())

        # One hash per key; threads asking for other keys are not blocked
        with key_lock:
            with self._lock:
                cached = self._memo.get(key)
            if cached is not None:
                return cached

            file_path = directory.header_path(header)
            digest = self._lookup_persisted(file_path)
            if digest is None:
                digest = compute_file_hash(file_path, self.algorithm)
                self._remember(file_path, digest)

            with self._lock:
                self._memo[key] = digest
                self._key_locks.pop(key, None)
            return digest

    def _lookup_persisted(self, file_path: Path) -> Optional[str]:
        if self.cache_file is None:
            return None
        with self._lock:
            entry = self._persisted.get(str(file_path))
        if not entry:
            return None
        stat = file_path.stat()
        if entry.get("size") != stat.st_size or entry.get("mtime_ns") != stat.st_mtime_ns:
            logger.debug(f"Stale fingerprint for {file_path}")
            return None
        if entry.get("algorithm") != self.algorithm:
            return None
        return entry.get("digest")

    def _remember(self, file_path: Path, digest: str):
        if self.cache_file is None:
            return
        stat = file_path.stat()
        with self._lock:
            self._persisted[str(file_path)] = {
                "algorithm": self.algorithm,
                "digest": digest,
                "size": stat.st_size,
                "mtime_ns": stat.st_mtime_ns,
            }
            self._dirty = True

    @contextmanager
    def _file_lock(self):
        """
        Hold the cache file lock.

        Raises:
            FingerprintCacheLockTimeout: If lock cannot be acquired within timeout
        """
        lock_path = self.cache_file.with_name(self.cache_file.name + ".lock")
        lock_path.parent.mkdir(parents=True, exist_ok=True)
        lock = FileLock(lock_path, timeout=self.lock_timeout)

        try:
            with lock:
                yield
        except Timeout as e:
            logger.error(
                f"Failed to acquire fingerprint cache lock within {self.lock_timeout}s"
            )
            raise FingerprintCacheLockTimeout(
                f"Could not acquire lock on {self.cache_file} within "
                f"{self.lock_timeout} seconds"
            ) from e

    def _read_entries(self) -> Dict[str, dict]:
        if not self.cache_file.exists():
            return {}
        try:
            data = json.loads(self.cache_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable fingerprint cache {self.cache_file}: {e}")
            return {}
        if not isinstance(data, dict) or data.get("version") != CACHE_FORMAT_VERSION:
            logger.warning(f"Ignoring fingerprint cache with unknown format: {self.cache_file}")
            return {}
        entries = data.get("entries")
        return entries if isinstance(entries, dict) else {}

    def load(self) -> int:
        """
        Load persisted digests.

        Returns:
            Number of entries loaded (0 without a cache file)
        """
        if self.cache_file is None:
            return 0
        with self._file_lock():
            entries = self._read_entries()
        with self._lock:
            self._persisted.update(entries)
        logger.debug(f"Loaded {len(entries)} fingerprints from {self.cache_file}")
        return len(entries)

    def save(self) -> bool:
        """
        Merge new digests into the cache file.

        Returns:
            True if the file was written
        """
        if self.cache_file is None or not self._dirty:
            return False
        with self._file_lock():
            entries = self._read_entries()
            with self._lock:
                entries.update(self._persisted)
                self._dirty = False
            payload = {"version": CACHE_FORMAT_VERSION, "entries": entries}
            atomic_write(self.cache_file, json.dumps(payload, indent=2, sort_keys=True))
        logger.debug(f"Saved {len(entries)} fingerprints to {self.cache_file}")
        return True
