"""
Entry point for running HeaderKit CLI as a module.

Usage: python -m headerkit.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
