"""
C library family registry.

A family tag identifies the C library lineage a set of headers belongs to
(glibc, musl, a BSD libc, ...). Headers from different families must never be
mixed for one target, since struct layouts and constants differ between them.

Family tags show up in two places:

- ``generic-<family>`` directories, which hold headers shared by every target
  of that family. The family part must be a registered tag.
- Triple directories and targets, whose family is inferred from the
  (operating system, ABI) pair by an ordered list of rules.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from headerkit.cross.triple import WILDCARD, Triple

logger = logging.getLogger(__name__)

GENERIC = "generic"
FAMILY_DIRECTORY_PREFIX = "generic-"

DEFAULT_FAMILIES = (
    "glibc",
    "musl",
    "mingw",
    "darwin",
    "netbsd",
    "freebsd",
    "openbsd",
    "dragonfly",
    "wasi",
    "bsd-generic",
)


@dataclass(frozen=True)
class FamilyRule:
    """
    Map an (os, abi) pair to a family.

    Attributes:
        os: Operating system the rule applies to
        family: Family tag assigned when the rule matches
        abi_prefix: Optional ABI prefix ('gnu' matches 'gnu', 'gnueabihf', ...);
            None matches every ABI
    """

    os: str
    family: str
    abi_prefix: Optional[str] = None

    def applies(self, os: str, abi: str) -> bool:
        if os != self.os:
            return False
        if self.abi_prefix is None:
            return True
        return abi != WILDCARD and abi.startswith(self.abi_prefix)


DEFAULT_RULES = (
    FamilyRule("linux", "glibc", "gnu"),
    FamilyRule("linux", "musl", "musl"),
    FamilyRule("windows", "mingw", "gnu"),
    FamilyRule("macos", "darwin"),
    FamilyRule("ios", "darwin"),
    FamilyRule("tvos", "darwin"),
    FamilyRule("watchos", "darwin"),
    FamilyRule("visionos", "darwin"),
    FamilyRule("netbsd", "netbsd"),
    FamilyRule("freebsd", "freebsd"),
    FamilyRule("openbsd", "openbsd"),
    FamilyRule("dragonfly", "dragonfly"),
    FamilyRule("wasi", "wasi"),
)


class FamilyRegistry:
    """
    Registry of known family tags and family inference rules.

    Rules are evaluated in order; extra rules passed to the constructor are
    evaluated before the built-in ones.

    Example:
        >>> registry = FamilyRegistry()
        >>> registry.infer_family("linux", "gnueabihf")
        'glibc'
        >>> registry.parse_family_directory("generic-musl")
        'musl'
    """

    def __init__(
        self,
        extra_families: Iterable[str] = (),
        extra_rules: Iterable[FamilyRule] = (),
        include_defaults: bool = True,
    ):
        families = list(DEFAULT_FAMILIES) if include_defaults else []
        rules: List[FamilyRule] = list(extra_rules)
        if include_defaults:
            rules.extend(DEFAULT_RULES)

        for family in extra_families:
            if family not in families:
                families.append(family)

        # Families named by rules are registered implicitly
        for rule in rules:
            if rule.family not in families:
                families.append(rule.family)
                logger.debug(f"Registered family '{rule.family}' from rule {rule}")

        if GENERIC in families:
            raise ValueError(f"'{GENERIC}' is reserved and cannot be a family tag")

        self._families: Tuple[str, ...] = tuple(families)
        self._rules: Tuple[FamilyRule, ...] = tuple(rules)

    @property
    def families(self) -> Tuple[str, ...]:
        return self._families

    @property
    def rules(self) -> Tuple[FamilyRule, ...]:
        return self._rules

    def is_known(self, family: str) -> bool:
        return family in self._families

    def parse_family_directory(self, name: str) -> Optional[str]:
        """
        Return the family of a ``generic-<family>`` directory name.

        Returns:
            Family tag, or None if the name is not a registered family directory
        """
        if not name.startswith(FAMILY_DIRECTORY_PREFIX):
            return None
        family = name[len(FAMILY_DIRECTORY_PREFIX) :]
        return family if self.is_known(family) else None

    def infer_family(self, os: str, abi: str) -> Optional[str]:
        """
        Infer the family of a target from its OS and ABI.

        Returns:
            Family tag, or None if no rule applies
        """
        if os == WILDCARD:
            return None
        for rule in self._rules:
            if rule.applies(os, abi):
                return rule.family
        return None

    def directory_family(self, pattern: Triple) -> str:
        """
        Family of a triple directory.

        Directories whose OS is the wildcard, or whose (os, abi) no rule
        covers, are family-neutral and tagged ``generic``.
        """
        family = self.infer_family(pattern.operating_system, pattern.abi)
        return family if family is not None else GENERIC


def is_compatible(family: str, other: str) -> bool:
    """Two family tags may share a search path if equal or either is generic."""
    return family == other or GENERIC in (family, other)
