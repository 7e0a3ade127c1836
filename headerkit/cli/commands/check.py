"""
Check command implementation.

Resolves a target and reports missing headers and shadowed headers whose
copies differ. Exits non-zero on any missing header, and on shadowed
divergent headers in strict mode.
"""

import json
import logging

from headerkit.cli.utils import (
    create_engine,
    load_config,
    print_warning,
    read_headers_file,
)
from headerkit.resolution.checker import check
from headerkit.resolution.fingerprints import FingerprintCache

logger = logging.getLogger(__name__)


def _collect_headers(args, config):
    if args.all_headers:
        return None
    headers = list(args.headers or [])
    if args.headers_file:
        headers.extend(read_headers_file(args.headers_file))
    # Command line headers replace the configured list
    if not headers:
        headers = list(config.required_headers)
    return headers or None


def run(args) -> int:
    """
    Run the check command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code from the check report
    """
    config = load_config(args.config)
    engine = create_engine(args, config)

    search_path = engine.resolve(args.target, required_family=args.family)
    headers = _collect_headers(args, config)
    strict = args.strict or config.strict

    with FingerprintCache(config.fingerprint_cache) as fingerprints:
        report = check(search_path, headers, strict=strict, fingerprints=fingerprints)

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
        for warning in report.warnings:
            print_warning(warning)
    else:
        print(report.format_summary())

    return report.exit_code
