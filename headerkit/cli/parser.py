"""
HeaderKit CLI argument parser.

This module implements the command-line interface for HeaderKit using argparse.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Get version from package
try:
    from importlib.metadata import version

    __version__ = version("headerkit")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


class CLI:
    """HeaderKit command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="hkit",
            description="HeaderKit - Target-triple C library header resolution",
            epilog='Use "hkit COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"HeaderKit {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./headerkit.yaml)",
        )
        parser.add_argument(
            "--include-root",
            type=Path,
            metavar="PATH",
            help="Header tree root containing <arch>-<os>-<abi> directories",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_index_command(subparsers)
        self._add_resolve_command(subparsers)
        self._add_which_command(subparsers)
        self._add_check_command(subparsers)

        return parser

    def _add_index_command(self, subparsers):
        """Add 'index' subcommand."""
        parser = subparsers.add_parser(
            "index",
            help="List header directories",
            description="Index the header tree and list its directories",
        )
        parser.add_argument("--json", action="store_true", help="Output JSON")

    def _add_target_arguments(self, parser):
        parser.add_argument("target", metavar="TARGET", help="Target triple (arch-os-abi)")
        parser.add_argument(
            "--family",
            metavar="FAMILY",
            help="Required C library family (e.g., glibc, musl, netbsd)",
        )

    def _add_resolve_command(self, subparsers):
        """Add 'resolve' subcommand."""
        parser = subparsers.add_parser(
            "resolve",
            help="Print the header search path for a target",
            description="Resolve the ordered header search directories for a target",
        )
        self._add_target_arguments(parser)
        output = parser.add_mutually_exclusive_group()
        output.add_argument(
            "--flags",
            action="store_true",
            help="Print compiler include flags instead of paths",
        )
        output.add_argument("--json", action="store_true", help="Output JSON")
        parser.add_argument(
            "--flag",
            default="-isystem",
            metavar="FLAG",
            help="Include flag used with --flags (default: -isystem)",
        )

    def _add_which_command(self, subparsers):
        """Add 'which' subcommand."""
        parser = subparsers.add_parser(
            "which",
            help="Print the file a header include resolves to",
            description="Locate the authoritative copy of a header for a target",
        )
        self._add_target_arguments(parser)
        parser.add_argument("header", metavar="HEADER", help="Header path (e.g., sys/types.h)")

    def _add_check_command(self, subparsers):
        """Add 'check' subcommand."""
        parser = subparsers.add_parser(
            "check",
            help="Check headers for a target",
            description=(
                "Report missing headers and shadowed headers whose copies diverge. "
                "Headers named on the command line replace required_headers from "
                "the configuration. Without any, every header on the search path "
                "is checked."
            ),
        )
        self._add_target_arguments(parser)
        parser.add_argument(
            "headers", nargs="*", metavar="HEADER", help="Required header paths"
        )
        parser.add_argument(
            "--headers-file",
            type=Path,
            metavar="FILE",
            help="File listing required headers, one per line",
        )
        parser.add_argument(
            "--all",
            action="store_true",
            dest="all_headers",
            help="Check every header on the search path, ignoring required headers",
        )
        parser.add_argument(
            "--strict",
            action="store_true",
            help="Treat shadowed divergent headers as errors",
        )
        parser.add_argument("--json", action="store_true", help="Output JSON")

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "index": "headerkit.cli.commands.index",
            "resolve": "headerkit.cli.commands.resolve",
            "which": "headerkit.cli.commands.which",
            "check": "headerkit.cli.commands.check",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        import importlib

        module = importlib.import_module(module_name)

        if not hasattr(module, "run"):
            logger.error(f"Command module {module_name} has no run() function")
            return 1

        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
