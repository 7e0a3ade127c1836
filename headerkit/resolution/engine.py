"""
Header search path resolution.

Given a concrete target triple, computes the ordered list of header
directories a compiler should search, most specific first::

    x86_64-linux-gnu      (arch + os + abi)
    x86_64-linux-any      (two components)
    any-linux-any         (os only)
    generic-glibc         (library family fallback)

When the same relative header exists in several directories of the result,
the first occurrence is authoritative, matching first-match-wins include
semantics. The engine never touches the filesystem; it only reads the
prebuilt index, so one index can serve any number of concurrent resolutions.
"""

import logging
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Set, Tuple, Union

from headerkit.core.exceptions import (
    AmbiguousFamilyError,
    MalformedTripleError,
    NoMatchError,
    ResolutionError,
)
from headerkit.cross.families import GENERIC, is_compatible
from headerkit.cross.triple import Triple, normalize_triple, parse_triple
from headerkit.index.tree import HeaderDirectory, HeaderTreeIndex

logger = logging.getLogger(__name__)


class SearchPath:
    """
    Ordered header directories for one resolved target.

    Holds directory names and looks records up through the owning index
    rather than copying them. The name list itself is a frozen snapshot.
    """

    def __init__(
        self,
        index: HeaderTreeIndex,
        target: Triple,
        family: Optional[str],
        names: Tuple[str, ...],
    ):
        self._index = index
        self._target = target
        self._family = family
        self._names = tuple(names)

    @property
    def index(self) -> HeaderTreeIndex:
        return self._index

    @property
    def target(self) -> Triple:
        return self._target

    @property
    def family(self) -> Optional[str]:
        """Effective library family of the resolution (None if family-neutral)."""
        return self._family

    @property
    def names(self) -> Tuple[str, ...]:
        return self._names

    @property
    def directories(self) -> List[HeaderDirectory]:
        return [self._index[name] for name in self._names]

    def __iter__(self) -> Iterator[HeaderDirectory]:
        return iter(self.directories)

    def __len__(self) -> int:
        return len(self._names)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SearchPath):
            return NotImplemented
        return (
            self._index is other._index
            and self._target == other._target
            and self._family == other._family
            and self._names == other._names
        )

    def __hash__(self) -> int:
        return hash((id(self._index), self._target, self._family, self._names))

    def __repr__(self) -> str:
        return f"SearchPath(target={self._target}, names={list(self._names)})"

    def include_paths(self) -> List[Path]:
        """Absolute directory paths, most specific first."""
        return [self._index[name].path for name in self._names]

    def include_flags(self, flag: str = "-isystem") -> List[str]:
        """
        Compiler arguments for the search path.

        Example:
            >>> search_path.include_flags("-I")
            ['-I', '/opt/include/x86_64-linux-gnu', '-I', '/opt/include/generic-glibc']
        """
        flags: List[str] = []
        for path in self.include_paths():
            flags.extend([flag, str(path)])
        return flags

    def winner(self, header: str) -> Optional[str]:
        """Name of the first directory providing a header, or None."""
        for name in self._names:
            if self._index[name].provides(header):
                return name
        return None

    def locate(self, header: str) -> Optional[Path]:
        """Authoritative file for a header under first-match-wins semantics."""
        name = self.winner(header)
        if name is None:
            return None
        return self._index[name].header_path(header)

    def headers(self) -> Set[str]:
        """Union of all header paths reachable through this search path."""
        result: Set[str] = set()
        for directory in self.directories:
            result.update(directory.headers)
        return result

    def to_dict(self) -> dict:
        return {
            "target": str(self._target),
            "family": self._family,
            "directories": list(self._names),
            "include_paths": [str(p) for p in self.include_paths()],
        }


class ResolutionEngine:
    """
    Resolve targets against a header tree index.

    Example:
        >>> engine = ResolutionEngine(build_index(Path("lib/libc/include")))
        >>> engine.resolve("sparc64-netbsd-none").names
        ('sparc64-netbsd-none',)
    """

    def __init__(
        self,
        index: HeaderTreeIndex,
        aliases: Optional[Mapping[str, Mapping[str, str]]] = None,
    ):
        """
        Initialize engine.

        Args:
            index: Header tree index to resolve against
            aliases: Optional component alias tables applied to targets
        """
        self.index = index
        self.aliases = aliases or {}

    def parse_target(self, target: Union[str, Triple]) -> Triple:
        """Parse and normalize a target, which must be concrete."""
        triple = parse_triple(target) if isinstance(target, str) else target
        triple = normalize_triple(triple, self.aliases)
        if not triple.is_concrete:
            raise MalformedTripleError(
                str(target), "a resolution target cannot contain 'any'"
            )
        return triple

    def resolve(
        self, target: Union[str, Triple], required_family: Optional[str] = None
    ) -> SearchPath:
        """
        Compute the search path for a target.

        Args:
            target: Concrete target triple (string or Triple)
            required_family: Optional library family every directory must
                belong to (family-neutral directories are always kept)

        Returns:
            SearchPath ordered most specific first

        Raises:
            MalformedTripleError: If target is malformed or not concrete
            ResolutionError: If required_family is not a registered family
            NoMatchError: If no directory applies to the target
            AmbiguousFamilyError: If directories from conflicting families
                apply and no required_family was given
        """
        triple = self.parse_target(target)
        registry = self.index.registry

        if required_family is not None and not registry.is_known(required_family):
            raise ResolutionError(
                f"Unknown library family: {required_family}. "
                f"Known families: {', '.join(registry.families)}"
            )

        family = required_family or registry.infer_family(
            triple.operating_system, triple.abi
        )

        candidates = [d for d in self.index if d.applies_to(triple, family)]
        logger.debug(
            f"{triple}: {len(candidates)} matching directories "
            f"(family={family or 'unknown'})"
        )

        if required_family is not None:
            kept = []
            for directory in candidates:
                if is_compatible(directory.family, required_family):
                    kept.append(directory)
                else:
                    logger.debug(
                        f"{triple}: dropping {directory.name} "
                        f"(family {directory.family} != {required_family})"
                    )
            candidates = kept

        if not candidates:
            raise NoMatchError(str(triple), self.index.names())

        candidates.sort(key=lambda d: d.sort_key())

        if required_family is None:
            self._check_families(triple, candidates)
            if family is None:
                family = next(
                    (d.family for d in candidates if d.family != GENERIC), None
                )

        search_path = SearchPath(
            self.index, triple, family, tuple(d.name for d in candidates)
        )
        logger.debug(f"Resolved {triple} -> {', '.join(search_path.names)}")
        return search_path

    def _check_families(self, triple: Triple, directories: List[HeaderDirectory]):
        by_family: Dict[str, List[str]] = defaultdict(list)
        for directory in directories:
            if directory.family != GENERIC:
                by_family[directory.family].append(directory.name)

        if len(by_family) > 1:
            raise AmbiguousFamilyError(str(triple), by_family)


def resolve(
    index: HeaderTreeIndex,
    target: Union[str, Triple],
    required_family: Optional[str] = None,
    aliases: Optional[Mapping[str, Mapping[str, str]]] = None,
) -> SearchPath:
    """Resolve a target against an index (see :meth:`ResolutionEngine.resolve`)."""
    return ResolutionEngine(index, aliases=aliases).resolve(target, required_family)
