"""Configuration module for HeaderKit.

This module provides YAML configuration parsing and validation for headerkit.yaml.
"""

from headerkit.config.parser import (
    CONFIG_FILENAME,
    FamiliesConfig,
    HeaderKitConfig,
    parse_config,
)
from headerkit.core.exceptions import ConfigError

__all__ = [
    "CONFIG_FILENAME",
    "FamiliesConfig",
    "HeaderKitConfig",
    "ConfigError",
    "parse_config",
]
