"""
Unit tests for the conflict/completeness checker.
"""

from unittest.mock import patch

import pytest

from headerkit.core.exceptions import MissingHeaderError, ShadowedHeaderError
from headerkit.core.verification import compute_file_hash
from headerkit.index.tree import build_index
from headerkit.resolution.checker import ShadowedHeader, check, normalize_header
from headerkit.resolution.engine import resolve
from headerkit.resolution.fingerprints import FingerprintCache


@pytest.fixture
def glibc_path(linux_tree):
    """Search path [x86_64-linux-gnu, any-linux-gnu, ..., generic-glibc]."""
    return resolve(build_index(linux_tree), "x86_64-linux-gnu")


class TestShadowedDivergent:
    """Tests for shadowed divergent detection."""

    def test_divergent_override_flagged(self, glibc_path):
        """Test that a differing generic copy is reported, winner most specific."""
        report = check(glibc_path, {"bits/link_lavcurrent.h"})

        assert report.winners == {"bits/link_lavcurrent.h": "x86_64-linux-gnu"}
        assert report.shadowed == [
            ShadowedHeader("bits/link_lavcurrent.h", "x86_64-linux-gnu", ("generic-glibc",))
        ]
        assert report.missing == []
        assert report.ok
        assert report.exit_code == 0

    def test_identical_copies_not_flagged(self, glibc_path):
        """Test that byte-identical duplicates are not divergent."""
        report = check(glibc_path, {"bits/wordsize.h"})

        assert report.winners == {"bits/wordsize.h": "x86_64-linux-gnu"}
        assert report.shadowed == []

    def test_warning_by_default(self, glibc_path):
        """Test that shadowed headers are warnings outside strict mode."""
        report = check(glibc_path, {"bits/link_lavcurrent.h"})

        assert report.errors == []
        assert len(report.warnings) == 1
        assert "generic-glibc" in report.warnings[0]
        report.raise_for_errors()

    def test_fatal_in_strict_mode(self, glibc_path):
        """Test that strict mode promotes shadowed headers to errors."""
        report = check(glibc_path, {"bits/link_lavcurrent.h"}, strict=True)

        assert not report.ok
        assert report.exit_code == 1
        assert report.warnings == []
        assert len(report.errors) == 1
        with pytest.raises(ShadowedHeaderError) as exc_info:
            report.raise_for_errors()
        assert exc_info.value.shadowed == ["bits/link_lavcurrent.h"]

    def test_logs_warning(self, glibc_path, caplog):
        """Test that shadowed headers are logged as warnings."""
        with caplog.at_level("WARNING"):
            check(glibc_path, {"bits/link_lavcurrent.h"})

        assert "bits/link_lavcurrent.h" in caplog.text


class TestMissing:
    """Tests for missing header detection."""

    def test_missing_flagged(self, glibc_path):
        """Test that an unprovided header is missing."""
        report = check(glibc_path, {"stdio.h", "sys/epoll.h"})

        assert report.missing == ["sys/epoll.h"]
        assert report.winners == {"stdio.h": "generic-glibc"}
        assert not report.ok
        assert report.errors == ["missing: sys/epoll.h"]

    def test_missing_raises(self, glibc_path):
        """Test that missing headers are fatal."""
        report = check(glibc_path, {"sys/epoll.h"})

        with pytest.raises(MissingHeaderError) as exc_info:
            report.raise_for_errors()
        assert exc_info.value.missing == ["sys/epoll.h"]

    def test_missing_before_shadowed(self, glibc_path):
        """Test that missing headers are raised ahead of strict findings."""
        report = check(glibc_path, {"sys/epoll.h", "bits/link_lavcurrent.h"}, strict=True)

        with pytest.raises(MissingHeaderError):
            report.raise_for_errors()

    def test_header_outside_search_path_is_missing(self, glibc_path):
        """Test that a header only in another family's directory is missing."""
        report = check(glibc_path, {"bits/alltypes.h"})

        assert report.missing == ["bits/alltypes.h"]


class TestCheckBehavior:
    """Tests for general checker behavior."""

    def test_idempotent(self, glibc_path):
        """Test that checking twice yields equal reports."""
        headers = {"bits/link_lavcurrent.h", "stdio.h", "sys/epoll.h"}

        assert check(glibc_path, headers) == check(glibc_path, headers)

    def test_full_audit_when_no_headers_given(self, glibc_path):
        """Test that None checks every reachable header."""
        report = check(glibc_path)

        assert set(report.winners) == glibc_path.headers()
        assert report.missing == []
        assert [s.header for s in report.shadowed] == ["bits/link_lavcurrent.h"]

    def test_empty_requirement(self, glibc_path):
        """Test that an empty requirement set checks nothing."""
        report = check(glibc_path, [])

        assert report.winners == {}
        assert report.ok

    def test_header_names_normalized(self, glibc_path):
        """Test that include names are normalized before lookup."""
        report = check(glibc_path, ["./bits\\link_lavcurrent.h", "/stdio.h"])

        assert set(report.winners) == {"bits/link_lavcurrent.h", "stdio.h"}

    def test_shared_fingerprint_cache(self, glibc_path):
        """Test that a shared cache hashes each file once across checks."""
        cache = FingerprintCache()

        with patch(
            "headerkit.resolution.fingerprints.compute_file_hash",
            wraps=compute_file_hash,
        ) as mock_hash:
            check(glibc_path, {"bits/link_lavcurrent.h"}, fingerprints=cache)
            check(glibc_path, {"bits/link_lavcurrent.h"}, fingerprints=cache)

        assert mock_hash.call_count == 2
        assert len(cache) == 2

    def test_single_provider_not_hashed(self, glibc_path):
        """Test that headers with one provider need no fingerprint."""
        with patch("headerkit.resolution.fingerprints.compute_file_hash") as mock_hash:
            check(glibc_path, {"gnu/lib-names.h"})

        mock_hash.assert_not_called()


class TestReportOutput:
    """Tests for report rendering."""

    def test_to_dict(self, glibc_path):
        """Test machine-readable output."""
        data = check(glibc_path, {"bits/link_lavcurrent.h", "sys/epoll.h"}).to_dict()

        assert data["target"] == "x86_64-linux-gnu"
        assert data["search_path"][0] == "x86_64-linux-gnu"
        assert data["ok"] is False
        assert data["missing"] == ["sys/epoll.h"]
        assert data["shadowed"] == [
            {
                "header": "bits/link_lavcurrent.h",
                "winner": "x86_64-linux-gnu",
                "divergent": ["generic-glibc"],
            }
        ]

    def test_format_summary(self, glibc_path):
        """Test human-readable output."""
        summary = check(
            glibc_path, {"bits/link_lavcurrent.h", "sys/epoll.h"}
        ).format_summary()

        assert "Target: x86_64-linux-gnu" in summary
        assert "Missing headers:" in summary
        assert "sys/epoll.h" in summary
        assert "Shadowed divergent headers:" in summary
        assert summary.endswith("FAILED")

    def test_format_summary_ok(self, glibc_path):
        """Test summary of a clean report."""
        summary = check(glibc_path, {"stdio.h"}).format_summary()

        assert summary.endswith("OK")


class TestNormalizeHeader:
    """Tests for normalize_header."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("sys/types.h", "sys/types.h"),
            ("./sys/types.h", "sys/types.h"),
            ("sys\\types.h", "sys/types.h"),
            ("  stdio.h\n", "stdio.h"),
            ("/stdio.h", "stdio.h"),
        ],
    )
    def test_normalize(self, raw, expected):
        """Test include name normalization."""
        assert normalize_header(raw) == expected
