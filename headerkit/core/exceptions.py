"""
Centralized exception hierarchy for HeaderKit.

This module defines all custom exceptions used across the codebase
so that callers can distinguish malformed input, malformed header trees,
resolution failures and checker failures.
"""

from typing import Iterable, List


# ============================================================================
# Base Exceptions
# ============================================================================


class HeaderKitError(Exception):
    """Base exception for all HeaderKit errors."""

    pass


# ============================================================================
# Triple Exceptions
# ============================================================================


class TripleError(HeaderKitError):
    """Base exception for target triple errors."""

    pass


class MalformedTripleError(TripleError):
    """Raised when a triple string does not parse into three non-empty components."""

    def __init__(self, descriptor: str, reason: str):
        self.descriptor = descriptor
        self.reason = reason
        super().__init__(f"Malformed triple '{descriptor}': {reason}")


# ============================================================================
# Header Tree Exceptions
# ============================================================================


class MalformedTreeError(HeaderKitError):
    """Raised when the include root cannot be indexed as a header tree."""

    pass


# ============================================================================
# Resolution Exceptions
# ============================================================================


class ResolutionError(HeaderKitError):
    """Base exception for header resolution errors."""

    pass


class NoMatchError(ResolutionError):
    """Raised when no header directory matches the requested target."""

    def __init__(self, target: str, considered: Iterable[str]):
        self.target = target
        self.considered: List[str] = sorted(considered)
        msg = f"No header directory matches target: {target}"
        if self.considered:
            msg += f" (considered: {', '.join(self.considered)})"
        else:
            msg += " (header tree is empty)"
        super().__init__(msg)


class AmbiguousFamilyError(ResolutionError):
    """Raised when directories of conflicting library families match one target."""

    def __init__(self, target: str, families: dict):
        self.target = target
        # family -> directory names
        self.families = {k: sorted(v) for k, v in sorted(families.items())}
        details = "; ".join(
            f"{family}: {', '.join(names)}" for family, names in self.families.items()
        )
        super().__init__(
            f"Conflicting library families for target {target} ({details}). "
            f"Pass a required family to disambiguate."
        )


# ============================================================================
# Checker Exceptions
# ============================================================================


class CheckError(HeaderKitError):
    """Base exception for header check failures."""

    pass


class MissingHeaderError(CheckError):
    """Raised when required headers are absent from every search directory."""

    def __init__(self, missing: Iterable[str]):
        self.missing: List[str] = sorted(missing)
        super().__init__(f"Missing headers: {', '.join(self.missing)}")


class ShadowedHeaderError(CheckError):
    """Raised in strict mode when shadowed copies of a header diverge."""

    def __init__(self, shadowed: Iterable[str]):
        self.shadowed: List[str] = sorted(shadowed)
        super().__init__(f"Shadowed divergent headers: {', '.join(self.shadowed)}")


class FingerprintCacheLockTimeout(CheckError):
    """Raised when the persistent fingerprint cache lock cannot be acquired."""

    pass


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigError(HeaderKitError):
    """Configuration parsing or validation error."""

    pass
