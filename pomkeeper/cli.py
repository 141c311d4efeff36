"""
Command-line interface for pomkeeper.

This module provides the main CLI entry point and handles global options,
configuration loading, and command registration.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from pomkeeper.config import load_config
from pomkeeper.__version__ import __version__
from pomkeeper.context import PomKeeperContext
from pomkeeper.exceptions import ConfigError, PomKeeperError
from pomkeeper.utils.logger import get_logger, setup_logging
from pomkeeper.utils.console import print_error, print_warning, reconfigure_console
from pomkeeper.commands.use_latest import use_latest_versions
from pomkeeper.commands.use_next import use_next_versions
from pomkeeper.commands.update_properties import update_properties

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar="POMKEEPER_CONFIG",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv).",
)
@click.option(
    "--color/--no-color",
    default=True,
    help="Enable or disable colored output.",
    envvar="POMKEEPER_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="pomkeeper",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """pomkeeper: keep the dependency versions of a Maven pom.xml current.

    \b
    Available commands:
      pomkeeper use-latest-versions   Move to the latest allowed versions
      pomkeeper use-next-versions     Move one version forward
      pomkeeper update-properties     Update version properties and the parent

    \b
    Examples:
      pomkeeper use-latest-versions --dry-run
      pomkeeper use-next-versions --no-allow-major
      pomkeeper -v update-properties path/to/pom.xml

    Use ``pomkeeper COMMAND --help`` for command-specific options.
    """
    # Respect NO_COLOR for the console and the log formatter
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()

    _configure_logging(verbose)

    try:
        loaded_config = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    pomkeeper_ctx = PomKeeperContext()
    pomkeeper_ctx.config_path = config or loaded_config.source_path
    pomkeeper_ctx.color = color
    pomkeeper_ctx.verbose = verbose
    pomkeeper_ctx.config = loaded_config
    ctx.obj = pomkeeper_ctx

    logger.debug("pomkeeper v%s", __version__)
    logger.debug("Config path: %s", pomkeeper_ctx.config_path)
    logger.debug("Verbosity: %s | Color: %s", verbose, color)


def _configure_logging(verbose: int) -> None:
    """Configure logging level based on verbosity flags."""
    if verbose <= 0:
        level = logging.WARNING
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    setup_logging(level=level, verbose=verbose >= 2)
    logger.debug("Logging initialized at %s level", logging.getLevelName(level))


cli.add_command(use_latest_versions)
cli.add_command(use_next_versions)
cli.add_command(update_properties)


def main() -> int:
    """Main entry point for the pomkeeper CLI.

    Returns:
        Exit code:
            0   Success
            1   Unhandled or application error
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        cli(standalone_mode=False)
        return 0

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except PomKeeperError as exc:
        print_error(str(exc))
        logger.debug(
            "PomKeeperError details: %s",
            exc.details or "<none>",
            exc_info=True,
        )
        return 1

    except (KeyboardInterrupt, click.Abort):
        print_warning("\nOperation cancelled by user")
        return 130

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return 1


if __name__ == "__main__":
    sys.exit(main())
