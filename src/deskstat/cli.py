#!/usr/bin/env python3
"""
Deskstat CLI - command-line interface for the Deskstat desktop widget.

This module provides the widget entry point plus theme compile and config
validation commands.
"""

import argparse
import logging
import signal
import sys
from typing import Any, Dict, List, Optional

from rich.logging import RichHandler

from . import __version__
from .config.loader import ConfigLoader
from .config.settings import ShellConfig
from .utils.errors import CompileError, ConfigurationError, DeskstatError

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def setup_logging(config: ShellConfig) -> None:
    """Configure the root logger from the verbosity and colour options."""
    level = logging.DEBUG if config.verbose > 0 or config.debug else logging.INFO

    if config.color:
        handler: logging.Handler = RichHandler(show_path=config.verbose > 1, rich_tracebacks=True)
        handler.setFormatter(logging.Formatter("%(name)s - %(message)s"))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logging.basicConfig(level=level, handlers=[handler], force=True)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    # Options are suppressed unless given so config file values are not overridden
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-c", "--config", default=argparse.SUPPRESS, help="Path to YAML configuration file"
    )
    common.add_argument(
        "-d",
        "--debug",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Enter debug mode. Show as a framed window",
    )
    common.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=argparse.SUPPRESS,
        help="Be verbose. Specify multiple times for increasing verbosity",
    )
    common.add_argument(
        "-t",
        "--theme",
        default=argparse.SUPPRESS,
        help="Main theme HTML file or theme package name (default: deskstat-theme-default)",
    )
    common.add_argument(
        "--refresh",
        type=int,
        metavar="MS",
        default=argparse.SUPPRESS,
        help="Time in ms between system statistics refreshes on power (default: 1000)",
    )
    common.add_argument(
        "--refresh-battery",
        type=int,
        metavar="MS",
        default=argparse.SUPPRESS,
        help="Time in ms between system statistics refreshes on battery (default: 10000)",
    )
    common.add_argument(
        "--debug-stats",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Log the stats object sent to the window",
    )
    common.add_argument(
        "--watch",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Watch the theme directory and reload on any changes",
    )
    common.add_argument(
        "--no-color",
        dest="color",
        action="store_false",
        default=argparse.SUPPRESS,
        help="Disable colors",
    )

    parser = argparse.ArgumentParser(
        prog="deskstat",
        description="Deskstat - themeable desktop widget for system statistics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        parents=[common],
        epilog="""
Examples:
  deskstat                                   # Run with the default theme
  deskstat run -t ~/themes/mine/index.html   # Run a theme file
  deskstat run -t my-theme --watch           # Run a theme package, reload on change
  deskstat compile -t my-theme -o out.html   # Compile a theme to a file
  deskstat validate ~/.deskstat/config.yaml  # Validate a configuration file
""",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("run", parents=[common], help="Run the widget (default)")

    compile_parser = subparsers.add_parser(
        "compile", parents=[common], help="Compile a theme and print the document path"
    )
    compile_parser.add_argument(
        "-o", "--output", default=argparse.SUPPRESS, help="Write the document to this path"
    )

    validate_parser = subparsers.add_parser("validate", help="Validate a configuration file")
    validate_parser.add_argument("path", help="Path to YAML configuration file")

    return parser


def config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Collect the options given on the command line."""
    names = ShellConfig.option_names()
    return {name: getattr(args, name) for name in names if hasattr(args, name)}


def run_widget(config: ShellConfig) -> int:
    """Run the widget until its window closes."""
    from .session import DeskstatSession

    session = DeskstatSession(config)

    def signal_handler(signum, frame):
        """Handle shutdown signals gracefully"""
        logger.info(f"Received signal {signum}, shutting down gracefully...")
        session.running = False
        raise KeyboardInterrupt()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    try:
        session.run()
    except KeyboardInterrupt:
        logger.info("Exit")
        return 0
    except DeskstatError as e:
        logger.error(f"{e}")
        return 1

    logger.info("Exit")
    return 0


def compile_theme(config: ShellConfig) -> int:
    """Compile the theme once and print the document path."""
    from .theme.compiler import ThemeCompiler

    compiler = ThemeCompiler.from_config(config)
    try:
        path = compiler.compile()
    except CompileError as e:
        logger.error(f"{e}")
        return 1
    finally:
        compiler.close(keep_document=True)

    print(path)
    return 0


def validate_config(path: str) -> int:
    """Validate a configuration file and report the result."""
    print(f"Validating {path}...")
    try:
        ConfigLoader().load(path)
    except ConfigurationError as e:
        print(f"\n❌ Validation FAILED:\n  {e}")
        return 1

    print("\n✅ Configuration is valid")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command == "validate":
        return validate_config(args.path)

    try:
        config = ConfigLoader().load(getattr(args, "config", None), config_overrides(args))
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(config)

    if args.command == "compile":
        return compile_theme(config)

    return run_widget(config)


if __name__ == "__main__":
    sys.exit(main())
