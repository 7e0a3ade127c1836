"""
Unit tests for header fingerprints.
"""

import json
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock, patch

import pytest
from filelock import Timeout

from headerkit.core.exceptions import FingerprintCacheLockTimeout
from headerkit.core.verification import compute_file_hash
from headerkit.index.tree import build_index
from headerkit.resolution.fingerprints import CACHE_FORMAT_VERSION, FingerprintCache

HEADER = "bits/link_lavcurrent.h"


@pytest.fixture
def index(linux_tree):
    return build_index(linux_tree)


class TestFingerprint:
    """Tests for in-memory fingerprints."""

    def test_differing_content(self, index):
        """Test that different content has different digests."""
        cache = FingerprintCache()

        assert cache.fingerprint(index["x86_64-linux-gnu"], HEADER) != cache.fingerprint(
            index["generic-glibc"], HEADER
        )

    def test_identical_content(self, index):
        """Test that equal content has equal digests."""
        cache = FingerprintCache()

        assert cache.fingerprint(
            index["x86_64-linux-gnu"], "bits/wordsize.h"
        ) == cache.fingerprint(index["generic-glibc"], "bits/wordsize.h")

    def test_matches_sha256(self, index):
        """Test that the digest is the file's SHA-256."""
        directory = index["generic-glibc"]

        digest = FingerprintCache().fingerprint(directory, HEADER)

        assert digest == compute_file_hash(directory.header_path(HEADER), "sha256")
        assert len(digest) == 64

    def test_memoized(self, index):
        """Test that each (directory, header) is hashed once."""
        cache = FingerprintCache()

        with patch(
            "headerkit.resolution.fingerprints.compute_file_hash",
            wraps=compute_file_hash,
        ) as mock_hash:
            for _ in range(3):
                cache.fingerprint(index["generic-glibc"], HEADER)

        mock_hash.assert_called_once()
        assert len(cache) == 1

    def test_missing_file(self, index):
        """Test that a vanished file raises."""
        directory = index["generic-glibc"]
        directory.header_path(HEADER).unlink()

        with pytest.raises(FileNotFoundError):
            FingerprintCache().fingerprint(directory, HEADER)

    def test_no_cache_file_load_save(self):
        """Test that load/save are no-ops without a cache file."""
        cache = FingerprintCache()

        assert cache.load() == 0
        assert cache.save() is False


class TestPersistentCache:
    """Tests for the JSON-backed cache."""

    def test_save_writes_entries(self, index, tmp_path):
        """Test that computed digests are persisted."""
        cache_file = tmp_path / "cache" / "fingerprints.json"

        with FingerprintCache(cache_file) as cache:
            digest = cache.fingerprint(index["generic-glibc"], HEADER)

        data = json.loads(cache_file.read_text())
        entry = data["entries"][str(index["generic-glibc"].header_path(HEADER))]
        assert data["version"] == CACHE_FORMAT_VERSION
        assert entry["digest"] == digest
        assert entry["algorithm"] == "sha256"

    def test_reuses_persisted_digest(self, index, tmp_path):
        """Test that a later run skips hashing unchanged files."""
        cache_file = tmp_path / "fingerprints.json"
        with FingerprintCache(cache_file) as cache:
            expected = cache.fingerprint(index["generic-glibc"], HEADER)

        with patch("headerkit.resolution.fingerprints.compute_file_hash") as mock_hash:
            with FingerprintCache(cache_file) as cache:
                digest = cache.fingerprint(index["generic-glibc"], HEADER)

        mock_hash.assert_not_called()
        assert digest == expected

    def test_stale_entry_recomputed(self, index, tmp_path):
        """Test that a changed file is re-hashed."""
        cache_file = tmp_path / "fingerprints.json"
        path = index["generic-glibc"].header_path(HEADER)
        with FingerprintCache(cache_file) as cache:
            old = cache.fingerprint(index["generic-glibc"], HEADER)

        path.write_text("#define LAV_CURRENT 3\n")
        stat = path.stat()
        os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + 1_000_000_000))

        with FingerprintCache(cache_file) as cache:
            new = cache.fingerprint(index["generic-glibc"], HEADER)

        assert new != old
        assert new == compute_file_hash(path)

    def test_save_without_changes(self, index, tmp_path):
        """Test that nothing is written when no digest was computed."""
        cache_file = tmp_path / "fingerprints.json"

        with FingerprintCache(cache_file):
            pass

        assert not cache_file.exists()

    def test_corrupt_cache_ignored(self, index, tmp_path):
        """Test that an unreadable cache file is ignored."""
        cache_file = tmp_path / "fingerprints.json"
        cache_file.write_text("{not json")

        cache = FingerprintCache(cache_file)

        assert cache.load() == 0
        cache.fingerprint(index["generic-glibc"], HEADER)
        assert cache.save() is True
        assert json.loads(cache_file.read_text())["version"] == CACHE_FORMAT_VERSION

    def test_unknown_version_ignored(self, tmp_path):
        """Test that a cache from another format version is ignored."""
        cache_file = tmp_path / "fingerprints.json"
        cache_file.write_text(json.dumps({"version": 99, "entries": {"x": {}}}))

        assert FingerprintCache(cache_file).load() == 0

    def test_merges_with_other_writers(self, index, tmp_path):
        """Test that saving keeps entries written by another process."""
        cache_file = tmp_path / "fingerprints.json"
        cache_file.write_text(
            json.dumps(
                {
                    "version": CACHE_FORMAT_VERSION,
                    "entries": {"/other/file.h": {"digest": "abc"}},
                }
            )
        )
        cache = FingerprintCache(cache_file)
        cache.fingerprint(index["generic-glibc"], HEADER)

        cache.save()

        entries = json.loads(cache_file.read_text())["entries"]
        assert "/other/file.h" in entries
        assert len(entries) == 2

    def test_lock_timeout(self, tmp_path):
        """Test lock timeout handling."""
        cache = FingerprintCache(tmp_path / "fingerprints.json", lock_timeout=0)

        with patch("headerkit.resolution.fingerprints.FileLock") as mock_lock_cls:
            mock_lock = MagicMock()
            mock_lock.__enter__.side_effect = Timeout(str(tmp_path / "x.lock"))
            mock_lock_cls.return_value = mock_lock

            with pytest.raises(FingerprintCacheLockTimeout):
                cache.load()


class TestConcurrentFingerprints:
    """Tests for sharing one cache between threads."""

    def test_each_header_hashed_once(self, index):
        """Test that racing threads hash every (directory, header) exactly once."""
        cache = FingerprintCache()
        keys = [
            (index[name], header)
            for name in ("x86_64-linux-gnu", "generic-glibc")
            for header in sorted(index[name].headers)
        ]
        barrier = threading.Barrier(8)

        def slow_hash(path, algorithm):
            time.sleep(0.01)
            return compute_file_hash(path, algorithm)

        def worker(_):
            barrier.wait()
            return [cache.fingerprint(directory, header) for directory, header in keys]

        with patch(
            "headerkit.resolution.fingerprints.compute_file_hash", side_effect=slow_hash
        ) as mock_hash:
            with ThreadPoolExecutor(max_workers=8) as executor:
                results = list(executor.map(worker, range(8)))

        assert all(result == results[0] for result in results)
        assert mock_hash.call_count == len(keys)
        assert len(cache) == len(keys)
        assert results[0] == [
            compute_file_hash(directory.header_path(header)) for directory, header in keys
        ]
