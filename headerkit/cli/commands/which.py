"""
Which command implementation.
"""

import logging

from headerkit.cli.utils import create_engine, load_config, print_error
from headerkit.resolution.checker import normalize_header

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the which command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 if the header was found, 1 otherwise)
    """
    config = load_config(args.config)
    engine = create_engine(args, config)

    search_path = engine.resolve(args.target, required_family=args.family)
    header = normalize_header(args.header)
    location = search_path.locate(header)

    if location is None:
        print_error(
            f"{header} not found for {search_path.target}",
            f"searched: {', '.join(search_path.names)}",
        )
        return 1

    print(location)
    return 0
