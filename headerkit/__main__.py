"""
Entry point for running HeaderKit CLI as a module.

Usage: python -m headerkit [command] [options]
"""

from headerkit.cli.parser import main

if __name__ == "__main__":
    main()
