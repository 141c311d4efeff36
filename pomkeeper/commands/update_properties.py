"""``update-properties``: bump version properties and the parent reference.

A property is only changed when every dependency that uses it agrees on
the same new version; otherwise it is reported and left alone.

Typical usage::

    $ pomkeeper update-properties
    $ pomkeeper update-properties --include-property jackson.version
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import click

from pomkeeper.commands.common import run_update, update_options
from pomkeeper.context import PomKeeperContext, pass_context
from pomkeeper.core import update_properties as update_properties_entry
from pomkeeper.exceptions import PomKeeperError
from pomkeeper.utils import get_logger, print_error

logger = get_logger("commands.update_properties")


@click.command("update-properties")
@update_options
@pass_context
def update_properties(
    ctx: PomKeeperContext,
    pom: Path,
    dry_run: bool,
    backup: bool,
    **overrides: Any,
) -> None:
    """Update version properties and the parent to the latest allowed versions."""
    try:
        run_update(
            ctx,
            pom,
            update_properties_entry,
            dry_run=dry_run,
            backup=backup,
            overrides=overrides,
        )
    except PomKeeperError as e:
        print_error(f"{e}")
        logger.debug("update-properties failed", exc_info=True)
        sys.exit(1)
