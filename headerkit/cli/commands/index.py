"""
Index command implementation.

Lists the header directories of the include root with their family,
specificity and header count.
"""

import json
import logging

from headerkit.cli.utils import load_config, load_index

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the index command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    logger.debug(f"Arguments: {args}")

    config = load_config(args.config)
    index = load_index(args, config)

    rows = [
        {
            "name": d.name,
            "family": d.family,
            "specificity": d.specificity,
            "headers": len(d.headers),
        }
        for d in sorted(index, key=lambda d: (d.sort_key(), d.name))
    ]

    if args.json:
        print(json.dumps({"root": str(index.root), "directories": rows}, indent=2))
        return 0

    if not rows:
        print(f"No header directories in {index.root}")
        return 0

    width = max(len(row["name"]) for row in rows)
    print(f"Header directories in {index.root}:")
    for row in rows:
        print(
            f"  {row['name']:<{width}}  family={row['family']:<12} "
            f"specificity={row['specificity']:>2}  headers={row['headers']}"
        )
    return 0
