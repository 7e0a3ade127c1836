"""
Search path resolution and checking for HeaderKit.
"""

from headerkit.resolution.engine import ResolutionEngine, SearchPath, resolve
from headerkit.resolution.fingerprints import FingerprintCache
from headerkit.resolution.checker import (
    CheckReport,
    ShadowedHeader,
    check,
    normalize_header,
)

__all__ = [
    "ResolutionEngine",
    "SearchPath",
    "resolve",
    "FingerprintCache",
    "CheckReport",
    "ShadowedHeader",
    "check",
    "normalize_header",
]
