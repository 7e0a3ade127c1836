"""
Core functionality for HeaderKit.

This package contains the foundational modules that other components depend on.
"""

from .exceptions import (
    HeaderKitError,
    TripleError,
    MalformedTripleError,
    MalformedTreeError,
    ResolutionError,
    NoMatchError,
    AmbiguousFamilyError,
    CheckError,
    MissingHeaderError,
    ShadowedHeaderError,
    FingerprintCacheLockTimeout,
    ConfigError,
)
from .filesystem import FilesystemError, atomic_write, to_posix_relative
from .verification import compute_file_hash

__all__ = [
    # Exceptions
    "HeaderKitError",
    "TripleError",
    "MalformedTripleError",
    "MalformedTreeError",
    "ResolutionError",
    "NoMatchError",
    "AmbiguousFamilyError",
    "CheckError",
    "MissingHeaderError",
    "ShadowedHeaderError",
    "FingerprintCacheLockTimeout",
    "ConfigError",
    # Filesystem
    "FilesystemError",
    "atomic_write",
    "to_posix_relative",
    # Hashing
    "compute_file_hash",
]
