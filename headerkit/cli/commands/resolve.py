"""
Resolve command implementation.

Prints the ordered include directories for a target, most specific first.
"""

import json
import logging

from headerkit.cli.utils import create_engine, load_config

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the resolve command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    config = load_config(args.config)
    engine = create_engine(args, config)

    search_path = engine.resolve(args.target, required_family=args.family)
    logger.debug(f"Resolved {search_path.target}: {', '.join(search_path.names)}")

    if args.json:
        print(json.dumps(search_path.to_dict(), indent=2))
    elif args.flags:
        print(" ".join(search_path.include_flags(args.flag)))
    else:
        for path in search_path.include_paths():
            print(path)

    return 0
