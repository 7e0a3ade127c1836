"""
Header tree index.

Scans an include root laid out as one subdirectory per header set::

    include/
        any-macos-any/ulimit.h
        generic-glibc/bits/link_lavcurrent.h
        m68k-netbsd-none/mac68k/z8530var.h
        sparc64-netbsd-none/machine/pmap.h

and builds an immutable lookup structure from directory name to the
directory's pattern, family, specificity and provided header paths.

Every top-level subdirectory must be either a registered ``generic-<family>``
directory or a valid triple pattern. Anything else fails the whole build,
since a partially trusted index could silently mis-resolve other targets.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterator, List, Mapping, Optional, Tuple

from headerkit.core.exceptions import MalformedTreeError, MalformedTripleError
from headerkit.core.filesystem import to_posix_relative
from headerkit.cross.families import FAMILY_DIRECTORY_PREFIX, GENERIC, FamilyRegistry
from headerkit.cross.triple import Triple, matches, parse_pattern, specificity

logger = logging.getLogger(__name__)

# Family directories rank below every triple pattern, including one-component ones
FAMILY_SPECIFICITY = -1


@dataclass(frozen=True)
class HeaderDirectory:
    """
    One top-level directory of the header tree.

    Attributes:
        name: Directory name (e.g., 'm68k-netbsd-none', 'generic-glibc')
        path: Absolute path to the directory
        pattern: Triple pattern, or None for family directories
        family: Library family tag ('glibc', 'netbsd', ..., or 'generic')
        headers: Header paths relative to the directory, POSIX separators
    """

    name: str
    path: Path
    pattern: Optional[Triple]
    family: str
    headers: FrozenSet[str]

    @property
    def is_family_directory(self) -> bool:
        return self.pattern is None

    @property
    def specificity(self) -> int:
        if self.pattern is None:
            return FAMILY_SPECIFICITY
        return specificity(self.pattern)

    def sort_key(self) -> Tuple:
        """Most specific first, then lexical component order."""
        if self.pattern is None:
            return (-self.specificity, 1, (self.family,))
        return (-self.specificity, 0, self.pattern.sort_key())

    def provides(self, header: str) -> bool:
        return header in self.headers

    def header_path(self, header: str) -> Path:
        """Absolute path of a header inside this directory."""
        return self.path.joinpath(*header.split("/"))

    def applies_to(self, target: Triple, family: Optional[str]) -> bool:
        """
        Check whether this directory contributes to a target's search path.

        Triple directories apply when their pattern matches the target.
        Family directories apply when their family is the target's family.
        """
        if self.pattern is None:
            return family is not None and self.family == family
        return matches(self.pattern, target)


class HeaderTreeIndex:
    """
    Immutable index of a header tree.

    Built once by :func:`build_index`; safe to share between threads since
    nothing mutates it after construction.
    """

    def __init__(
        self,
        root: Path,
        directories: Mapping[str, HeaderDirectory],
        registry: FamilyRegistry,
    ):
        self._root = root
        self._directories = MappingProxyType(
            {name: directories[name] for name in sorted(directories)}
        )
        self._registry = registry

    @property
    def root(self) -> Path:
        return self._root

    @property
    def registry(self) -> FamilyRegistry:
        return self._registry

    def names(self) -> List[str]:
        return list(self._directories)

    def get(self, name: str) -> Optional[HeaderDirectory]:
        return self._directories.get(name)

    def __getitem__(self, name: str) -> HeaderDirectory:
        return self._directories[name]

    def __contains__(self, name: object) -> bool:
        return name in self._directories

    def __iter__(self) -> Iterator[HeaderDirectory]:
        return iter(self._directories.values())

    def __len__(self) -> int:
        return len(self._directories)

    def families(self) -> List[str]:
        """Sorted family tags present in the tree, excluding 'generic'."""
        return sorted({d.family for d in self if d.family != GENERIC})

    def providers(self, header: str) -> List[str]:
        """Names of all directories providing a header, sorted by name."""
        return [d.name for d in self if d.provides(header)]

    def __repr__(self) -> str:
        return f"HeaderTreeIndex(root={self._root!s}, directories={len(self)})"


def _classify(
    name: str, registry: FamilyRegistry
) -> Tuple[Optional[Triple], Optional[str]]:
    """Return (pattern, family) for a directory name."""
    family = registry.parse_family_directory(name)
    if family is not None:
        return None, family

    if name.startswith(FAMILY_DIRECTORY_PREFIX):
        unknown = name[len(FAMILY_DIRECTORY_PREFIX) :]
        raise MalformedTreeError(
            f"Directory '{name}' names unknown library family '{unknown}'. "
            f"Known families: {', '.join(registry.families)}"
        )

    try:
        pattern = parse_pattern(name)
    except MalformedTripleError as e:
        raise MalformedTreeError(
            f"Directory '{name}' is neither a triple pattern nor a known family "
            f"directory: {e.reason}"
        ) from e

    return pattern, None


def scan_headers(directory: Path) -> FrozenSet[str]:
    """
    Record every file below a directory.

    Hidden files and directories (leading '.') are skipped.

    Returns:
        Relative POSIX paths of all regular files
    """
    headers = set()
    for entry in directory.rglob("*"):
        relative = to_posix_relative(entry, directory)
        if any(part.startswith(".") for part in relative.split("/")):
            continue
        if entry.is_file():
            headers.add(relative)
    return frozenset(headers)


def build_index(
    root: Path,
    registry: Optional[FamilyRegistry] = None,
    directory_families: Optional[Mapping[str, str]] = None,
    max_workers: Optional[int] = None,
) -> HeaderTreeIndex:
    """
    Scan an include root and build the header tree index.

    Args:
        root: Include root containing one subdirectory per header set
        registry: Family registry (default: built-in families and rules)
        directory_families: Explicit family per triple directory, overriding
            inference
        max_workers: Thread count for scanning subdirectories (default:
            executor default)

    Returns:
        Immutable HeaderTreeIndex

    Raises:
        MalformedTreeError: If the root is missing, a directory name is not
            self-describing, or a family override is invalid

    Example:
        >>> index = build_index(Path("lib/libc/include"))
        >>> index["generic-glibc"].family
        'glibc'
    """
    registry = registry or FamilyRegistry()
    directory_families = dict(directory_families or {})
    root = Path(root).resolve()

    if not root.is_dir():
        raise MalformedTreeError(f"Include root is not a directory: {root}")

    classified: Dict[str, Tuple[Optional[Triple], Optional[str]]] = {}
    for entry in sorted(root.iterdir()):
        if entry.name.startswith(".") or not entry.is_dir():
            logger.debug(f"Ignoring non-directory entry: {entry.name}")
            continue
        classified[entry.name] = _classify(entry.name, registry)

    for name, family in directory_families.items():
        if name not in classified:
            raise MalformedTreeError(f"Family override for unknown directory: {name}")
        if classified[name][0] is None:
            raise MalformedTreeError(
                f"Family override for family directory '{name}' is not allowed"
            )
        if not registry.is_known(family):
            raise MalformedTreeError(
                f"Family override for '{name}' names unknown family: {family}"
            )

    logger.debug(f"Scanning {len(classified)} header directories under {root}")

    with ThreadPoolExecutor(
        max_workers=max_workers, thread_name_prefix="HeaderScan"
    ) as executor:
        futures = {
            name: executor.submit(scan_headers, root / name) for name in classified
        }
        scanned = {name: future.result() for name, future in futures.items()}

    directories: Dict[str, HeaderDirectory] = {}
    for name in sorted(classified):
        pattern, family = classified[name]
        if pattern is not None:
            family = directory_families.get(name) or registry.directory_family(pattern)
        directories[name] = HeaderDirectory(
            name=name,
            path=root / name,
            pattern=pattern,
            family=family,
            headers=scanned[name],
        )
        logger.debug(
            f"Indexed {name}: family={family}, headers={len(scanned[name])}"
        )

    logger.info(f"Indexed {len(directories)} header directories from {root}")
    return HeaderTreeIndex(root, directories, registry)
