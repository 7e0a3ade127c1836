"""
Pytest configuration and shared fixtures for HeaderKit tests.
"""

import pytest
import tempfile
from pathlib import Path
from typing import Generator

# Import test fixtures to make them available to all tests
# These imports register the fixtures with pytest's fixture discovery system
# ruff: noqa: F401
from tests.fixtures.trees import (
    netbsd_tree,
    linux_tree,
    macos_tree,
)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create temporary directory for test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config_yaml(tmp_path: Path, linux_tree: Path) -> Path:
    """Create sample headerkit.yaml pointing at the linux tree."""
    config_content = """version: 1
include_root: include
strict: false
max_workers: 2
fingerprint_cache: .headerkit/fingerprints.json
required_headers:
  - stdio.h
"""
    config_file = tmp_path / "headerkit.yaml"
    config_file.write_text(config_content)
    return config_file
