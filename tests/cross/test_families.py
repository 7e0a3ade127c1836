"""
Unit tests for the library family registry.
"""

import pytest

from headerkit.cross.families import (
    GENERIC,
    FamilyRegistry,
    FamilyRule,
    is_compatible,
)
from headerkit.cross.triple import parse_pattern


class TestInferFamily:
    """Tests for target family inference."""

    @pytest.mark.parametrize(
        "os_name,abi,expected",
        [
            ("linux", "gnu", "glibc"),
            ("linux", "gnueabihf", "glibc"),
            ("linux", "musl", "musl"),
            ("linux", "muslabi64", "musl"),
            ("windows", "gnu", "mingw"),
            ("macos", "none", "darwin"),
            ("netbsd", "none", "netbsd"),
            ("freebsd", "none", "freebsd"),
            ("wasi", "musl", "wasi"),
        ],
    )
    def test_default_rules(self, os_name, abi, expected):
        """Test built-in inference rules."""
        assert FamilyRegistry().infer_family(os_name, abi) == expected

    def test_unknown_returns_none(self):
        """Test that uncovered targets have no family."""
        registry = FamilyRegistry()

        assert registry.infer_family("linux", "none") is None
        assert registry.infer_family("haiku", "none") is None
        assert registry.infer_family("any", "gnu") is None

    def test_extra_rules_take_precedence(self):
        """Test that configured rules are evaluated before built-ins."""
        registry = FamilyRegistry(extra_rules=[FamilyRule("linux", "uclibc", "gnu")])

        assert registry.infer_family("linux", "gnu") == "uclibc"
        assert registry.is_known("uclibc")


class TestDirectoryFamily:
    """Tests for directory family inference."""

    def test_os_specific_directory(self):
        """Test directory with a concrete OS covered by a rule."""
        registry = FamilyRegistry()

        assert registry.directory_family(parse_pattern("m68k-netbsd-none")) == "netbsd"
        assert registry.directory_family(parse_pattern("any-macos-any")) == "darwin"
        assert registry.directory_family(parse_pattern("any-linux-gnu")) == "glibc"

    def test_neutral_directories(self):
        """Test that uncovered patterns are generic."""
        registry = FamilyRegistry()

        assert registry.directory_family(parse_pattern("x86_64-linux-any")) == GENERIC
        assert registry.directory_family(parse_pattern("any-linux-any")) == GENERIC
        assert registry.directory_family(parse_pattern("x86_64-any-any")) == GENERIC


class TestFamilyDirectories:
    """Tests for generic-<family> directory names."""

    def test_known_family(self):
        """Test recognized family directories."""
        registry = FamilyRegistry()

        assert registry.parse_family_directory("generic-glibc") == "glibc"
        assert registry.parse_family_directory("generic-bsd-generic") == "bsd-generic"

    def test_unrecognized(self):
        """Test names that are not family directories."""
        registry = FamilyRegistry()

        assert registry.parse_family_directory("generic-foolibc") is None
        assert registry.parse_family_directory("glibc") is None
        assert registry.parse_family_directory("any-macos-any") is None

    def test_extra_family(self):
        """Test registering an extra family."""
        registry = FamilyRegistry(extra_families=["uclibc"])

        assert registry.parse_family_directory("generic-uclibc") == "uclibc"
        assert registry.families.count("uclibc") == 1

    def test_generic_is_reserved(self):
        """Test that 'generic' cannot be registered."""
        with pytest.raises(ValueError, match="reserved"):
            FamilyRegistry(extra_families=[GENERIC])


class TestCompatibility:
    """Tests for is_compatible."""

    def test_rules(self):
        """Test family compatibility."""
        assert is_compatible("glibc", "glibc")
        assert is_compatible("glibc", GENERIC)
        assert is_compatible(GENERIC, "netbsd")
        assert not is_compatible("glibc", "musl")
