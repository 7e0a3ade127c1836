"""Test fixtures for HeaderKit tests.

This package provides reusable pytest fixtures for testing HeaderKit components.

- trees: Header trees laid out as multi-target libc include roots

Import fixtures in your tests using:
    from tests.fixtures.trees import netbsd_tree, linux_tree
"""

__all__ = [
    "trees",
]
