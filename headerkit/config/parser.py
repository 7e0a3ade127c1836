"""YAML configuration parser for HeaderKit.

This module provides parsing and validation for headerkit.yaml configuration files.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from headerkit.core.exceptions import ConfigError
from headerkit.cross.families import FamilyRegistry, FamilyRule
from headerkit.cross.triple import COMPONENTS

CONFIG_FILENAME = "headerkit.yaml"


@dataclass
class FamiliesConfig:
    """Extra library families and inference rules."""

    known: List[str] = field(default_factory=list)
    rules: List[FamilyRule] = field(default_factory=list)


@dataclass
class HeaderKitConfig:
    """Complete HeaderKit configuration."""

    version: int = 1
    include_root: Optional[Path] = None
    strict: bool = False
    max_workers: Optional[int] = None
    fingerprint_cache: Optional[Path] = None
    families: FamiliesConfig = field(default_factory=FamiliesConfig)
    directory_families: Dict[str, str] = field(default_factory=dict)
    aliases: Dict[str, Dict[str, str]] = field(default_factory=dict)
    required_headers: List[str] = field(default_factory=list)

    def build_registry(self) -> FamilyRegistry:
        """Family registry with the configured families and rules added."""
        try:
            return FamilyRegistry(
                extra_families=self.families.known, extra_rules=self.families.rules
            )
        except ValueError as e:
            raise ConfigError(str(e)) from e


def parse_config(config_path: Path) -> HeaderKitConfig:
    """
    Parse headerkit.yaml configuration file.

    Relative paths in the file are resolved against the file's directory.

    Args:
        config_path: Path to headerkit.yaml

    Returns:
        Parsed and validated configuration

    Raises:
        ConfigError: If configuration is invalid
    """
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    if data is None:
        raise ConfigError("Configuration file is empty")

    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    return _parse_and_validate(data, config_path.resolve().parent)


def _parse_and_validate(data: dict, base_dir: Path) -> HeaderKitConfig:
    """Parse and validate configuration data."""
    if "version" not in data:
        raise ConfigError("Missing required field: version")

    if data["version"] != 1:
        raise ConfigError(f"Unsupported version: {data['version']} (expected 1)")

    unknown = set(data) - {
        "version",
        "include_root",
        "strict",
        "max_workers",
        "fingerprint_cache",
        "families",
        "directory_families",
        "aliases",
        "required_headers",
    }
    if unknown:
        raise ConfigError(f"Unknown configuration fields: {', '.join(sorted(unknown))}")

    strict = data.get("strict", False)
    if not isinstance(strict, bool):
        raise ConfigError("strict must be true or false")

    max_workers = data.get("max_workers")
    if max_workers is not None and (
        isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers < 1
    ):
        raise ConfigError(f"max_workers must be a positive integer, got {max_workers!r}")

    return HeaderKitConfig(
        version=1,
        include_root=_parse_path(data, "include_root", base_dir),
        strict=strict,
        max_workers=max_workers,
        fingerprint_cache=_parse_path(data, "fingerprint_cache", base_dir),
        families=_parse_families(data.get("families") or {}),
        directory_families=_parse_string_map(
            data.get("directory_families") or {}, "directory_families"
        ),
        aliases=_parse_aliases(data.get("aliases") or {}),
        required_headers=_parse_string_list(
            data.get("required_headers") or [], "required_headers"
        ),
    )


def _parse_path(data: dict, key: str, base_dir: Path) -> Optional[Path]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or not value:
        raise ConfigError(f"{key} must be a non-empty string")
    path = Path(value).expanduser()
    return path if path.is_absolute() else base_dir / path


def _parse_string_list(value: Any, key: str) -> List[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) and v for v in value):
        raise ConfigError(f"{key} must be a list of strings")
    return list(value)


def _parse_string_map(value: Any, key: str) -> Dict[str, str]:
    if not isinstance(value, dict):
        raise ConfigError(f"{key} must be a mapping")
    for k, v in value.items():
        if not isinstance(k, str) or not isinstance(v, str) or not v:
            raise ConfigError(f"{key} entries must map strings to strings")
    return dict(value)


def _parse_families(data: Any) -> FamiliesConfig:
    """Parse the families section."""
    if not isinstance(data, dict):
        raise ConfigError("families must be a mapping")

    known = _parse_string_list(data.get("known") or [], "families.known")

    rules = []
    for i, rule_data in enumerate(data.get("rules") or []):
        if not isinstance(rule_data, dict):
            raise ConfigError(f"families.rules[{i}] must be a mapping")
        if "os" not in rule_data or "family" not in rule_data:
            raise ConfigError(f"families.rules[{i}] requires 'os' and 'family'")
        abi = rule_data.get("abi")
        if abi is not None and not isinstance(abi, str):
            raise ConfigError(f"families.rules[{i}].abi must be a string")
        rules.append(
            FamilyRule(os=str(rule_data["os"]), family=str(rule_data["family"]), abi_prefix=abi)
        )

    return FamiliesConfig(known=known, rules=rules)


def _parse_aliases(data: Any) -> Dict[str, Dict[str, str]]:
    """Parse per-component alias tables."""
    if not isinstance(data, dict):
        raise ConfigError("aliases must be a mapping")

    aliases = {}
    for component, table in data.items():
        if component not in COMPONENTS:
            raise ConfigError(
                f"Unknown alias component: {component} "
                f"(expected one of: {', '.join(COMPONENTS)})"
            )
        aliases[component] = _parse_string_map(table or {}, f"aliases.{component}")
    return aliases
