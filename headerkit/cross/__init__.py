"""
Target description support for HeaderKit.

This module provides the target triple model and the C library family
registry used to keep incompatible header families apart.
"""

from headerkit.cross.triple import (
    Triple,
    WILDCARD,
    parse_triple,
    parse_pattern,
    specificity,
    matches,
    normalize_triple,
)
from headerkit.cross.families import (
    GENERIC,
    FamilyRule,
    FamilyRegistry,
    is_compatible,
)

__all__ = [
    "Triple",
    "WILDCARD",
    "parse_triple",
    "parse_pattern",
    "specificity",
    "matches",
    "normalize_triple",
    "GENERIC",
    "FamilyRule",
    "FamilyRegistry",
    "is_compatible",
]
