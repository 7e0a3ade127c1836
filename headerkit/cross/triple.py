"""
Target triple model.

A triple identifies a compilation target as ``<architecture>-<os>-<abi>``
(e.g. ``sparc64-netbsd-none``). Header directories are named with the same
syntax, where any component may be the wildcard ``any`` to make the directory
apply to many concrete targets (``any-macos-any``).

Usage:
    from headerkit.cross.triple import parse_triple, parse_pattern, matches

    target = parse_triple("x86_64-macos-none")
    pattern = parse_pattern("any-macos-any")
    assert matches(pattern, target)
"""

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple

from headerkit.core.exceptions import MalformedTripleError

WILDCARD = "any"
SEPARATOR = "-"

COMPONENTS = ("architecture", "operating_system", "abi")

_FORBIDDEN_CHARS = frozenset("/\\")


@dataclass(frozen=True)
class Triple:
    """
    Target triple or directory pattern.

    Attributes:
        architecture: CPU architecture (e.g., 'm68k', 'x86_64') or 'any'
        operating_system: Operating system (e.g., 'netbsd', 'macos') or 'any'
        abi: ABI (e.g., 'gnu', 'musl', 'none') or 'any'
    """

    architecture: str
    operating_system: str
    abi: str

    def __str__(self) -> str:
        return SEPARATOR.join(self.components())

    def components(self) -> Tuple[str, str, str]:
        """Return (architecture, operating_system, abi)."""
        return (self.architecture, self.operating_system, self.abi)

    @property
    def is_concrete(self) -> bool:
        """True if no component is the wildcard."""
        return WILDCARD not in self.components()

    @property
    def is_pattern(self) -> bool:
        """True if the triple is a valid directory pattern (some component concrete)."""
        return specificity(self) > 0

    def sort_key(self) -> Tuple[str, str, str]:
        """
        Deterministic tie-break key.

        Patterns of equal specificity are ordered lexically by architecture,
        then OS, then ABI, independent of filesystem scan order.
        """
        return self.components()

    @classmethod
    def wildcard(cls) -> "Triple":
        """The fully-wildcard triple ``any-any-any``."""
        return cls(WILDCARD, WILDCARD, WILDCARD)


def parse_triple(descriptor: str) -> Triple:
    """
    Parse a ``<arch>-<os>-<abi>`` string.

    No normalization is applied, so ``str(parse_triple(s)) == s`` for every
    string accepted here.

    Args:
        descriptor: Triple string

    Returns:
        Parsed Triple

    Raises:
        MalformedTripleError: If the string does not split into exactly three
            non-empty components

    Example:
        >>> parse_triple("m68k-netbsd-none").architecture
        'm68k'
    """
    if not isinstance(descriptor, str):
        raise MalformedTripleError(repr(descriptor), "expected a string")

    parts = descriptor.split(SEPARATOR)
    if len(parts) != 3:
        raise MalformedTripleError(
            descriptor, f"expected 3 '{SEPARATOR}'-separated components, got {len(parts)}"
        )

    for name, part in zip(COMPONENTS, parts):
        if not part:
            raise MalformedTripleError(descriptor, f"empty {name}")
        if part != part.strip() or any(c.isspace() for c in part):
            raise MalformedTripleError(descriptor, f"whitespace in {name}")
        if _FORBIDDEN_CHARS.intersection(part):
            raise MalformedTripleError(descriptor, f"path separator in {name}")

    return Triple(*parts)


def parse_pattern(name: str) -> Triple:
    """
    Parse a directory name as a triple pattern.

    Raises:
        MalformedTripleError: If the name is not a triple or is fully wildcard
    """
    pattern = parse_triple(name)
    if not pattern.is_pattern:
        raise MalformedTripleError(name, "a pattern needs at least one concrete component")
    return pattern


def specificity(pattern: Triple) -> int:
    """
    Count concrete (non-wildcard) components.

    Returns:
        Integer from 0 (``any-any-any``) to 3 (fully concrete)
    """
    return sum(1 for part in pattern.components() if part != WILDCARD)


def matches(pattern: Triple, target: Triple) -> bool:
    """
    Check whether a pattern applies to a target.

    A pattern matches iff each of its components is the wildcard or equals
    the target's component exactly.
    """
    return all(
        p == WILDCARD or p == t
        for p, t in zip(pattern.components(), target.components())
    )


def normalize_triple(
    triple: Triple, aliases: Optional[Mapping[str, Mapping[str, str]]] = None
) -> Triple:
    """
    Replace component synonyms with canonical names.

    Args:
        triple: Triple to normalize
        aliases: Per-component alias tables keyed by component name
            ('architecture', 'operating_system', 'abi')

    Returns:
        Normalized triple (the same object if nothing changed)

    Example:
        >>> normalize_triple(parse_triple("amd64-darwin-none"),
        ...                  {"architecture": {"amd64": "x86_64"},
        ...                   "operating_system": {"darwin": "macos"}})
        Triple(architecture='x86_64', operating_system='macos', abi='none')
    """
    if not aliases:
        return triple

    values: Dict[str, str] = {}
    for name, value in zip(COMPONENTS, triple.components()):
        table = aliases.get(name) or {}
        values[name] = table.get(value, value)

    normalized = Triple(**values)
    return triple if normalized == triple else normalized
