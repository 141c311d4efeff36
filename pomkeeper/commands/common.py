"""Shared plumbing for the update commands.

``use-latest-versions``, ``use-next-versions`` and ``update-properties``
differ only in which entry function they call. Everything around that
call lives here:

1. **Settings**: configuration file values overridden by CLI flags.
2. **PomReader / PomDocument**: the parsed model and the raw text buffer
   of the same ``pom.xml``.
3. **MavenRepositoryCatalog**: one shared cache of repository metadata.
4. **VersionUpdater**: the entry function's run against the buffer.
5. **Report**: a Rich table of applied changes, then an optional backup
   and an atomic write (skipped on ``--dry-run``).
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Dict, List

import click

from pomkeeper.config import PomKeeperConfig
from pomkeeper.constants import POM_FILE_NAME
from pomkeeper.context import PomKeeperContext
from pomkeeper.core import (
    CoordinateFilter,
    MavenRepositoryCatalog,
    Policy,
    PomDocument,
    PomReader,
    ProcessingSwitches,
    ReactorMembership,
    VersionUpdater,
    determine_segment_lock,
)
from pomkeeper.models import AppliedChange, ProjectModel
from pomkeeper.utils import (
    HTTPClient,
    colorize_update_type,
    create_timestamped_backup,
    get_logger,
    get_update_type,
    print_success,
    print_table,
    print_warning,
)

logger = get_logger("commands")

EntryFunction = Callable[[VersionUpdater, ProjectModel, Policy], List[AppliedChange]]

Decorator = Callable[[Callable[..., Any]], Callable[..., Any]]


def _stack(*decorators: Decorator) -> Decorator:
    def wrap(func: Callable[..., Any]) -> Callable[..., Any]:
        for decorator in reversed(decorators):
            func = decorator(func)
        return func

    return wrap


#: Options every update command accepts.
update_options = _stack(
    click.argument(
        "pom",
        type=click.Path(exists=True, path_type=Path),
        default=POM_FILE_NAME,
    ),
    click.option("--dry-run", is_flag=True, help="Show the changes without writing them."),
    click.option("--backup", is_flag=True, help="Create a backup file before writing."),
    click.option(
        "--allow-snapshots/--no-allow-snapshots",
        default=None,
        help="Consider snapshot versions as upgrade candidates.",
    ),
    click.option(
        "--allow-major/--no-allow-major",
        "allow_major_updates",
        default=None,
        help="Allow the major version segment to change.",
    ),
    click.option(
        "--allow-minor/--no-allow-minor",
        "allow_minor_updates",
        default=None,
        help="Allow the minor version segment to change.",
    ),
    click.option(
        "--allow-incremental/--no-allow-incremental",
        "allow_incremental_updates",
        default=None,
        help="Allow the incremental version segment to change.",
    ),
    click.option(
        "--exclude-reactor/--no-exclude-reactor",
        default=None,
        help="Skip artifacts built by the same multi-module project.",
    ),
    click.option(
        "--include",
        "includes",
        multiple=True,
        help="groupId[:artifactId[:type[:classifier]]] pattern to update (repeatable).",
    ),
    click.option(
        "--exclude",
        "excludes",
        multiple=True,
        help="groupId[:artifactId[:type[:classifier]]] pattern to leave alone (repeatable).",
    ),
    click.option(
        "--snapshots-only/--no-snapshots-only",
        "process_snapshots_only",
        default=None,
        help="Only update sites whose current version is a snapshot.",
    ),
    click.option(
        "--include-property",
        "include_properties",
        multiple=True,
        help="Property name to update (repeatable).",
    ),
    click.option(
        "--exclude-property",
        "exclude_properties",
        multiple=True,
        help="Property name to leave alone (repeatable).",
    ),
)

#: Site switches for the dependency commands.
site_options = _stack(
    click.option(
        "--process-parent/--no-process-parent",
        default=None,
        help="Also update the parent reference.",
    ),
    click.option(
        "--process-properties/--no-process-properties",
        default=None,
        help="Also update version properties.",
    ),
)


def resolve_settings(config: PomKeeperConfig, overrides: Dict[str, Any]) -> PomKeeperConfig:
    """Apply CLI ``overrides`` on top of ``config``.

    ``None`` and empty tuples mean "flag not given" and keep the
    configured value.
    """
    given = {
        name: list(value) if isinstance(value, tuple) else value
        for name, value in overrides.items()
        if value is not None and value != ()
    }
    return replace(config, **given)


def build_policy(settings: PomKeeperConfig) -> Policy:
    return Policy(
        segment_lock=determine_segment_lock(
            allow_major=settings.allow_major_updates,
            allow_minor=settings.allow_minor_updates,
            allow_incremental=settings.allow_incremental_updates,
        ),
        include_snapshots=settings.allow_snapshots,
        process_snapshots_only=settings.process_snapshots_only,
    )


def run_update(
    ctx: PomKeeperContext,
    pom: Path,
    entry: EntryFunction,
    *,
    dry_run: bool,
    backup: bool,
    overrides: Dict[str, Any],
) -> List[AppliedChange]:
    """Run ``entry`` against ``pom`` and write the result.

    Raises:
        PomKeeperError: The POM cannot be read or written, or a repository
            lookup failed.
    """
    settings = resolve_settings(ctx.config, overrides)
    pom_path = pom / POM_FILE_NAME if pom.is_dir() else pom
    logger.info("Updating versions in %s", pom_path)

    model = PomReader().read(pom_path)
    document = PomDocument.from_file(pom_path)
    document.resolve = lambda text, profile_id: model.interpolate(text, profile_id) or text

    coordinate_filter = CoordinateFilter(
        ReactorMembership(model.reactor),
        settings.includes,
        settings.excludes,
        exclude_reactor=settings.exclude_reactor,
    )
    switches = ProcessingSwitches(
        dependencies=settings.process_dependencies,
        dependency_management=settings.process_dependency_management,
        parent=settings.process_parent,
        properties=settings.process_properties,
    )

    with HTTPClient(timeout=settings.timeout) as http:
        updater = VersionUpdater(
            document,
            MavenRepositoryCatalog(http, settings.repositories),
            coordinate_filter,
            switches=switches,
            property_links=settings.property_links,
            auto_link=settings.auto_link_items,
            include_properties=settings.include_properties,
            exclude_properties=settings.exclude_properties,
        )
        changes = entry(updater, model, build_policy(settings))

    if updater.skips:
        logger.info("%d site(s) left unchanged", len(updater.skips))

    if not changes:
        print_success("All versions are up to date!")
        return changes

    display_changes(changes, dry_run)

    if dry_run:
        print_warning("Dry run mode - no changes written")
        return changes

    if backup:
        backup_path = create_timestamped_backup(pom_path)
        logger.info("Created backup: %s", backup_path)

    document.save()
    print_success(f"Updated {len(changes)} version(s) in {pom_path}")
    return changes


def display_changes(changes: List[AppliedChange], dry_run: bool) -> None:
    """Render applied changes as a Rich table.

    Example output::

        ┏━━━━━━━━━━━━━━━━━━━━┳━━━━━━━━━━━━┳━━━━━━━━━┳━━━━━━━━┳━━━━━━━━━━━━━┓
        ┃ Site               ┃ Kind       ┃ Current ┃ New    ┃ Change      ┃
        ┡━━━━━━━━━━━━━━━━━━━━╇━━━━━━━━━━━━╇━━━━━━━━━╇━━━━━━━━╇━━━━━━━━━━━━━┩
        │ junit:junit        │ dependency │  4.12   │ 4.13.2 │    minor    │
        │ ${jackson.version} │ property   │ 2.15.0  │ 2.15.3 │ incremental │
        └────────────────────┴────────────┴─────────┴────────┴─────────────┘
    """
    title = "Version Changes (Dry Run)" if dry_run else "Version Changes"

    data = []
    for change in changes:
        update_type = get_update_type(change.old_value, change.new_value)
        data.append(
            {
                "Site": change.site.label,
                "Kind": change.site.kind.value,
                "Current": change.old_value,
                "New": f"[bold green]{change.new_value}[/bold green]",
                "Change": colorize_update_type(update_type),
            }
        )

    column_styles = {
        "Site": {"style": "bold cyan", "no_wrap": True},
        "Kind": {"style": "dim"},
        "Current": {"justify": "center", "style": "dim"},
        "New": {"justify": "center"},
        "Change": {"justify": "center"},
    }
    print_table(data, title=title, column_styles=column_styles)

