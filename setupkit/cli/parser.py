"""
SetupKit CLI argument parser.

This module implements the command-line interface for SetupKit using argparse.

Usage:
    setupkit --llvm 12 --cmake --ninja 1.11.1
    setupkit --gcc true --meson --dir ~/toolchains -v

Every tool flag takes an optional version; without one (or with 'true') the
default version is installed. Installations run concurrently, activations
afterwards in the order the flags were given.
"""

import argparse
import asyncio
import logging
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from setupkit.config.defaults import DefaultVersionTable
from setupkit.config.settings import SetupConfig, load_config
from setupkit.core.exceptions import SetupKitError
from setupkit.core.platform import detect_platform
from setupkit.env.environment import Environment
from setupkit.env.rc_file import finalize_rc, source_rc
from setupkit.tools.brew import BOOTSTRAP_ERRORS, setup_brew
from setupkit.tools.installer import Installer
from setupkit.tools.registry import tool_names
from setupkit.versions.resolver import sync_versions

try:
    __version__ = version("setupkit")
except PackageNotFoundError:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)

# Tools installed from one LLVM release must agree on the version
LLVM_GROUP = ("llvm", "clangtidy", "clangformat")

ToolRequests = List[Tuple[str, str]]


class ToolAction(argparse.Action):
    """Records (tool, version) pairs in command-line order."""

    def __init__(self, option_strings, dest, tool: str = "", **kwargs):
        self.tool = tool
        super().__init__(option_strings, dest, nargs="?", const="true", **kwargs)

    def __call__(self, parser, namespace, values, option_string=None):
        requests = list(getattr(namespace, self.dest, None) or [])
        requests.append((self.tool, values))
        setattr(namespace, self.dest, requests)


class CLI:
    """SetupKit command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with one flag per tool.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="setupkit",
            description="SetupKit - install and activate C++ development tools",
            epilog="Versions: a release ('12', '12.0.1'), or 'true' for the default. "
            "'false' skips a tool.",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"SetupKit {__version__}"
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
            help="Path to configuration file (default: ./setupkit.yaml)",
        )
        parser.add_argument(
            "--dir",
            type=Path,
            metavar="DIR",
            help="Root directory for downloaded tools (default: ~/setupkit)",
        )
        parser.add_argument(
            "--arch",
            metavar="ARCH",
            help="Target architecture (default: host architecture)",
        )
        parser.add_argument(
            "--brew", action="store_true", help="Install Homebrew if it is missing"
        )

        # Tools
        tools = parser.add_argument_group("tools")
        for name in tool_names():
            tools.add_argument(
                f"--{name}",
                action=ToolAction,
                tool=name,
                dest="tools",
                metavar="VERSION",
                help=f"Install {name}",
            )

        return parser

    def parse_args(self, args: Optional[List[str]] = None) -> argparse.Namespace:
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

        # Configure logging
        self._configure_logging(parsed_args)

        try:
            config = load_config(parsed_args.config)
            table = DefaultVersionTable.load().with_overrides(config.versions)
        except SetupKitError as e:
            logger.error(f"Error: {e}")
            return 1

        requests = self._tool_requests(parsed_args, config)
        if requests is None:
            return 1
        if not requests and not parsed_args.brew:
            self.parser.print_help()
            return 1

        try:
            return asyncio.run(self._setup(parsed_args, config, table, requests))
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT

    def _tool_requests(self, args, config: SetupConfig) -> Optional[ToolRequests]:
        """
        Tools to install with their version requests.

        Command-line flags win over the configuration file's 'tools'. Returns
        None when the LLVM tools were given conflicting versions.
        """
        requests: ToolRequests = list(args.tools or config.tools.items())
        requests = [(tool, v) for tool, v in requests if v.lower() != "false"]

        options = dict(requests)
        if not sync_versions(options, LLVM_GROUP):
            logger.error(
                f"The versions of {', '.join(LLVM_GROUP)} must be the same "
                "since they are installed from one LLVM release"
            )
            return None

        return [(tool, options[tool]) for tool, _ in requests]

    async def _setup(
        self, args, config: SetupConfig, table: DefaultVersionTable, requests: ToolRequests
    ) -> int:
        platform = detect_platform()
        environment = Environment(rc_file=config.rc_file, persist=config.persist)
        installer = Installer(
            table,
            platform=platform,
            environment=environment,
            setup_dir=args.dir or config.setup_dir,
        )
        logger.debug(f"Setting up {', '.join(t for t, _ in requests)} on {platform}")

        failed = 0
        if args.brew:
            try:
                await setup_brew(environment, platform)
            except (SetupKitError, *BOOTSTRAP_ERRORS) as e:
                logger.error(f"brew: {e}")
                failed += 1

        failed += await self._install_all(installer, requests, args.arch)

        if config.persist and platform.os != "win32":
            source_rc(config.rc_file)
            finalize_rc(config.rc_file)

        if failed:
            logger.error(f"{failed} tool(s) failed to install")
            return 1
        return 0

    async def _install_all(
        self, installer: Installer, requests: ToolRequests, arch: Optional[str]
    ) -> int:
        """Install concurrently, then activate in request order. Returns failures."""
        results = await asyncio.gather(
            *(installer.ensure_installed(tool, v, arch) for tool, v in requests),
            return_exceptions=True,
        )

        failed = 0
        for (tool, _), result in zip(requests, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.error(f"{tool}: {result}")
                logger.debug(f"{tool} failed", exc_info=result)
                failed += 1
                continue

            if not await installer.activate(result):
                logger.warning(f"{tool}: installed, but its environment is only partially set up")
            logger.info(f"{tool} {result.version or '(default)'}: {result.bin_dir}")

        return failed

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


def main(argv: Optional[Sequence[str]] = None):
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run(list(argv) if argv is not None else None))


if __name__ == "__main__":
    main()
