"""``use-next-versions``: move dependencies one version forward.

Where ``use-latest-versions`` jumps to the newest allowed version, this
command picks the smallest version that is still newer than the current
one.

Typical usage::

    $ pomkeeper use-next-versions
    $ pomkeeper use-next-versions --snapshots-only --allow-snapshots
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import click

from pomkeeper.commands.common import run_update, site_options, update_options
from pomkeeper.context import PomKeeperContext, pass_context
from pomkeeper.core import use_next_versions as use_next_entry
from pomkeeper.exceptions import PomKeeperError
from pomkeeper.utils import get_logger, print_error

logger = get_logger("commands.use_next")


@click.command("use-next-versions")
@update_options
@site_options
@pass_context
def use_next_versions(
    ctx: PomKeeperContext,
    pom: Path,
    dry_run: bool,
    backup: bool,
    **overrides: Any,
) -> None:
    """Replace dependency versions with the next newer allowed versions."""
    try:
        run_update(
            ctx,
            pom,
            use_next_entry,
            dry_run=dry_run,
            backup=backup,
            overrides=overrides,
        )
    except PomKeeperError as e:
        print_error(f"{e}")
        logger.debug("use-next-versions failed", exc_info=True)
        sys.exit(1)
