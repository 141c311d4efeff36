"""``use-latest-versions``: move dependencies to their newest allowed version.

Typical usage::

    # Newest version of everything, majors included
    $ pomkeeper use-latest-versions

    # Stay within the current major, preview only
    $ pomkeeper use-latest-versions --no-allow-major --dry-run

    # Also bump version properties and the parent
    $ pomkeeper use-latest-versions --process-properties --process-parent
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import click

from pomkeeper.commands.common import run_update, site_options, update_options
from pomkeeper.context import PomKeeperContext, pass_context
from pomkeeper.core import use_latest_versions as use_latest_entry
from pomkeeper.exceptions import PomKeeperError
from pomkeeper.utils import get_logger, print_error

logger = get_logger("commands.use_latest")


@click.command("use-latest-versions")
@update_options
@site_options
@pass_context
def use_latest_versions(
    ctx: PomKeeperContext,
    pom: Path,
    dry_run: bool,
    backup: bool,
    **overrides: Any,
) -> None:
    """Replace dependency versions with the latest allowed versions.

    POM is a ``pom.xml`` file or a directory containing one (default:
    ``pom.xml``). Versions never cross a segment whose ``--no-allow-*``
    flag is set, and snapshots are only considered with
    ``--allow-snapshots``.
    """
    try:
        run_update(
            ctx,
            pom,
            use_latest_entry,
            dry_run=dry_run,
            backup=backup,
            overrides=overrides,
        )
    except PomKeeperError as e:
        print_error(f"{e}")
        logger.debug("use-latest-versions failed", exc_info=True)
        sys.exit(1)
