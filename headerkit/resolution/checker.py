"""
Conflict and completeness checking for resolved search paths.

For every required header the checker records the winning directory (the
first one providing it), flags headers that no directory provides, and flags
headers whose shadowed copies in later directories differ from the winner.
Shadowed divergent headers compile without error, since the compiler only
ever sees the winner, so they are reported rather than silently resolved.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from headerkit.core.exceptions import MissingHeaderError, ShadowedHeaderError
from headerkit.resolution.engine import SearchPath
from headerkit.resolution.fingerprints import FingerprintCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShadowedHeader:
    """
    A header whose shadowed copies differ from the winning copy.

    Attributes:
        header: Relative header path
        winner: Directory whose copy the compiler will use
        divergent: Later directories whose copy differs, in search order
    """

    header: str
    winner: str
    divergent: Tuple[str, ...]


@dataclass
class CheckReport:
    """Result of checking a search path."""

    target: str
    search_path: List[str]
    winners: Dict[str, str] = field(default_factory=dict)
    shadowed: List[ShadowedHeader] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    strict: bool = False

    @property
    def ok(self) -> bool:
        """False on any missing header, or any shadowed header in strict mode."""
        if self.missing:
            return False
        return not (self.strict and self.shadowed)

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1

    @property
    def errors(self) -> List[str]:
        errors = [f"missing: {header}" for header in self.missing]
        if self.strict:
            errors.extend(_describe_shadowed(s) for s in self.shadowed)
        return errors

    @property
    def warnings(self) -> List[str]:
        if self.strict:
            return []
        return [_describe_shadowed(s) for s in self.shadowed]

    def raise_for_errors(self):
        """
        Raise on fatal findings.

        Raises:
            MissingHeaderError: If any required header is missing
            ShadowedHeaderError: In strict mode, if any header is shadowed divergent
        """
        if self.missing:
            raise MissingHeaderError(self.missing)
        if self.strict and self.shadowed:
            raise ShadowedHeaderError(s.header for s in self.shadowed)

    def to_dict(self) -> dict:
        return {
            "target": self.target,
            "search_path": list(self.search_path),
            "strict": self.strict,
            "ok": self.ok,
            "winners": dict(sorted(self.winners.items())),
            "shadowed": [
                {
                    "header": s.header,
                    "winner": s.winner,
                    "divergent": list(s.divergent),
                }
                for s in self.shadowed
            ],
            "missing": list(self.missing),
        }

    def format_summary(self) -> str:
        """Human-readable summary of the report."""
        lines = [
            f"Target: {self.target}",
            f"Search path: {', '.join(self.search_path)}",
            f"Headers checked: {len(self.winners) + len(self.missing)}",
            "",
        ]

        if self.missing:
            lines.append("Missing headers:")
            for header in self.missing:
                lines.append(f"  {header}")
            lines.append("")

        if self.shadowed:
            title = "Shadowed divergent headers"
            lines.append(f"{title} (fatal in strict mode):" if self.strict else f"{title}:")
            for shadowed in self.shadowed:
                lines.append(f"  {_describe_shadowed(shadowed)}")
            lines.append("")

        lines.append("OK" if self.ok else "FAILED")
        return "\n".join(lines)


def _describe_shadowed(shadowed: ShadowedHeader) -> str:
    return (
        f"{shadowed.header}: {shadowed.winner} shadows differing copies in "
        f"{', '.join(shadowed.divergent)}"
    )


def normalize_header(header: str) -> str:
    """Normalize an include name ('./sys\\types.h' -> 'sys/types.h')."""
    header = header.strip().replace("\\", "/")
    while header.startswith("./"):
        header = header[2:]
    return header.lstrip("/")


def check(
    search_path: SearchPath,
    required_headers: Optional[Iterable[str]] = None,
    strict: bool = False,
    fingerprints: Optional[FingerprintCache] = None,
) -> CheckReport:
    """
    Check a search path for missing and shadowed divergent headers.

    Args:
        search_path: Resolved search path
        required_headers: Relative header paths the compilation unit needs;
            None checks every header reachable through the search path
        strict: Treat shadowed divergent headers as fatal
        fingerprints: Fingerprint cache to share across checks (a private
            one is used if omitted)

    Returns:
        CheckReport (headers processed in sorted order, so repeated checks
        of the same input produce equal reports)

    Example:
        >>> report = check(search_path, {"bits/link_lavcurrent.h"})
        >>> report.winners["bits/link_lavcurrent.h"]
        'x86_64-linux-gnu'
    """
    if fingerprints is None:
        fingerprints = FingerprintCache()
    directories = search_path.directories

    if required_headers is None:
        headers = sorted(search_path.headers())
    else:
        headers = sorted({normalize_header(h) for h in required_headers})

    report = CheckReport(
        target=str(search_path.target),
        search_path=list(search_path.names),
        strict=strict,
    )

    for header in headers:
        providers = [d for d in directories if d.provides(header)]
        if not providers:
            logger.debug(f"{report.target}: {header} not provided by any directory")
            report.missing.append(header)
            continue

        winner = providers[0]
        report.winners[header] = winner.name

        if len(providers) == 1:
            continue

        winner_digest = fingerprints.fingerprint(winner, header)
        divergent = tuple(
            d.name
            for d in providers[1:]
            if fingerprints.fingerprint(d, header) != winner_digest
        )
        if divergent:
            shadowed = ShadowedHeader(header, winner.name, divergent)
            report.shadowed.append(shadowed)
            logger.warning(f"{report.target}: {_describe_shadowed(shadowed)}")

    logger.info(
        f"Checked {len(headers)} headers for {report.target}: "
        f"{len(report.missing)} missing, {len(report.shadowed)} shadowed divergent"
    )
    return report
