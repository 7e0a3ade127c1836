"""
Header tree indexing for HeaderKit.
"""

from headerkit.index.tree import (
    FAMILY_SPECIFICITY,
    HeaderDirectory,
    HeaderTreeIndex,
    build_index,
    scan_headers,
)

__all__ = [
    "FAMILY_SPECIFICITY",
    "HeaderDirectory",
    "HeaderTreeIndex",
    "build_index",
    "scan_headers",
]
