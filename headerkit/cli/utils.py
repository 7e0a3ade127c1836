"""
Shared utilities for CLI commands.

Provides configuration loading, index construction and output helpers used
across multiple CLI commands so they behave consistently.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional

from headerkit.config.parser import CONFIG_FILENAME, HeaderKitConfig, parse_config
from headerkit.index.tree import HeaderTreeIndex, build_index
from headerkit.resolution.engine import ResolutionEngine

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration Management
# ============================================================================


def load_config(config_file: Optional[Path] = None) -> HeaderKitConfig:
    """
    Load configuration for a command.

    An explicitly given file must exist. Otherwise ./headerkit.yaml is used
    when present, and built-in defaults when not.

    Args:
        config_file: Optional explicit configuration file

    Returns:
        Parsed configuration

    Raises:
        ConfigError: If the file is missing (explicit only) or invalid
    """
    if config_file is not None:
        return parse_config(Path(config_file))

    default_config = Path.cwd() / CONFIG_FILENAME
    if default_config.exists():
        logger.debug(f"Loading configuration from {default_config}")
        return parse_config(default_config)

    logger.debug("No config file found, using defaults")
    return HeaderKitConfig()


def get_include_root(args, config: HeaderKitConfig) -> Path:
    """
    Determine the include root (command line wins over configuration).

    Raises:
        ValueError: If neither source names an include root
    """
    include_root = getattr(args, "include_root", None) or config.include_root
    if include_root is None:
        raise ValueError(
            "No include root given. Use --include-root or set include_root "
            f"in {CONFIG_FILENAME}."
        )
    return Path(include_root)


def load_index(args, config: HeaderKitConfig) -> HeaderTreeIndex:
    """Build the header tree index described by args and config."""
    return build_index(
        get_include_root(args, config),
        registry=config.build_registry(),
        directory_families=config.directory_families,
        max_workers=config.max_workers,
    )


def create_engine(args, config: HeaderKitConfig) -> ResolutionEngine:
    """Build the index and wrap it in a resolution engine."""
    return ResolutionEngine(load_index(args, config), aliases=config.aliases)


def read_headers_file(headers_file: Path) -> List[str]:
    """
    Read required header paths, one per line.

    Blank lines and lines starting with '#' are ignored.

    Raises:
        FileNotFoundError: If the file doesn't exist
    """
    if not headers_file.exists():
        raise FileNotFoundError(f"Headers file not found: {headers_file}")

    headers = []
    with open(headers_file, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#"):
                headers.append(line)
    return headers


# ============================================================================
# User Interface / Output Formatting
# ============================================================================


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)


def print_warning(message: str):
    """Print warning message to stderr."""
    print(f"WARNING: {message}", file=sys.stderr)
