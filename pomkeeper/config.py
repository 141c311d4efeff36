"""Configuration file loader for pomkeeper.

Handles discovery, loading, parsing, and validation of configuration files.
Supports two formats:

- ``pomkeeper.toml`` with settings under a ``[pomkeeper]`` table
- ``pyproject.toml`` with settings under a ``[tool.pomkeeper]`` table

Discovery order:

1. Explicit path from ``--config`` or ``POMKEEPER_CONFIG``
2. ``pomkeeper.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.pomkeeper]`` section

Configuration precedence: defaults < config file < CLI args.

Typical usage::

    config = load_config()  # Auto-discover
    config = load_config(Path("custom.toml"))  # Explicit path

Example (``pomkeeper.toml``)::

    [pomkeeper]
    repositories = ["https://repo1.maven.org/maven2"]
    allow_major_updates = false
    excludes = ["org.springframework:*"]
    process_properties = true

    [pomkeeper.property_links]
    "jackson.version" = ["com.fasterxml.jackson.core:jackson-databind"]
"""

from __future__ import annotations

from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import tomli as tomllib

from pomkeeper.constants import (
    DEFAULT_ALLOW_INCREMENTAL_UPDATES,
    DEFAULT_ALLOW_MAJOR_UPDATES,
    DEFAULT_ALLOW_MINOR_UPDATES,
    DEFAULT_ALLOW_SNAPSHOTS,
    DEFAULT_AUTO_LINK_ITEMS,
    DEFAULT_EXCLUDE_REACTOR,
    DEFAULT_PROCESS_DEPENDENCIES,
    DEFAULT_PROCESS_DEPENDENCY_MANAGEMENT,
    DEFAULT_PROCESS_PARENT,
    DEFAULT_PROCESS_PROPERTIES,
    DEFAULT_PROCESS_SNAPSHOTS_ONLY,
    DEFAULT_TIMEOUT,
    MAVEN_CENTRAL_URL,
)
from pomkeeper.exceptions import ConfigError
from pomkeeper.models.coordinate import Coordinate
from pomkeeper.utils.logger import get_logger

logger = get_logger("config")

_BOOL_OPTIONS = (
    "allow_snapshots",
    "allow_major_updates",
    "allow_minor_updates",
    "allow_incremental_updates",
    "exclude_reactor",
    "process_dependencies",
    "process_dependency_management",
    "process_parent",
    "process_properties",
    "process_snapshots_only",
    "auto_link_items",
)

_LIST_OPTIONS = (
    "repositories",
    "includes",
    "excludes",
    "include_properties",
    "exclude_properties",
)


@dataclass
class PomKeeperConfig:
    """Parsed and validated pomkeeper configuration.

    All fields have defaults, so empty config files are valid.

    Attributes:
        repositories: Maven repository base URLs, searched in order.
        allow_snapshots: Consider snapshot versions as upgrade candidates.
        allow_major_updates: Allow the major segment to change.
        allow_minor_updates: Allow the minor segment to change.
        allow_incremental_updates: Allow the incremental segment to change.
        exclude_reactor: Never update artifacts built by the same reactor.
        process_dependencies: Update ``project/dependencies``.
        process_dependency_management: Update ``dependencyManagement``.
        process_parent: Update the parent reference.
        process_properties: Update version properties.
        process_snapshots_only: Only touch sites whose version is a snapshot.
        auto_link_items: Link properties to dependencies using ``${name}``.
        includes: ``groupId[:artifactId[:type[:classifier]]]`` patterns to update.
        excludes: Patterns never to update.
        include_properties: Property names to update (empty means all).
        exclude_properties: Property names never to update.
        property_links: Property name to ``groupId:artifactId`` coordinates.
        timeout: HTTP timeout in seconds.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    repositories: List[str] = field(default_factory=lambda: [MAVEN_CENTRAL_URL])
    allow_snapshots: bool = DEFAULT_ALLOW_SNAPSHOTS
    allow_major_updates: bool = DEFAULT_ALLOW_MAJOR_UPDATES
    allow_minor_updates: bool = DEFAULT_ALLOW_MINOR_UPDATES
    allow_incremental_updates: bool = DEFAULT_ALLOW_INCREMENTAL_UPDATES
    exclude_reactor: bool = DEFAULT_EXCLUDE_REACTOR
    process_dependencies: bool = DEFAULT_PROCESS_DEPENDENCIES
    process_dependency_management: bool = DEFAULT_PROCESS_DEPENDENCY_MANAGEMENT
    process_parent: bool = DEFAULT_PROCESS_PARENT
    process_properties: bool = DEFAULT_PROCESS_PROPERTIES
    process_snapshots_only: bool = DEFAULT_PROCESS_SNAPSHOTS_ONLY
    auto_link_items: bool = DEFAULT_AUTO_LINK_ITEMS
    includes: List[str] = field(default_factory=list)
    excludes: List[str] = field(default_factory=list)
    include_properties: List[str] = field(default_factory=list)
    exclude_properties: List[str] = field(default_factory=list)
    property_links: Dict[str, List[str]] = field(default_factory=dict)
    timeout: int = DEFAULT_TIMEOUT

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging.

        Excludes ``source_path`` metadata.
        """
        values: Dict[str, Any] = {name: getattr(self, name) for name in _BOOL_OPTIONS}
        values.update({name: list(getattr(self, name)) for name in _LIST_OPTIONS})
        values["property_links"] = dict(self.property_links)
        values["timeout"] = self.timeout
        return values


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Search order:

    1. ``explicit_path`` (from ``--config`` or ``POMKEEPER_CONFIG``)
    2. ``pomkeeper.toml`` in current directory
    3. ``pyproject.toml`` with ``[tool.pomkeeper]`` section in current directory

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    # 1. Explicit path takes priority
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    # 2. pomkeeper.toml in current directory
    pomkeeper_toml = cwd / "pomkeeper.toml"
    if pomkeeper_toml.is_file():
        logger.debug("Found pomkeeper.toml: %s", pomkeeper_toml)
        return pomkeeper_toml

    # 3. pyproject.toml with [tool.pomkeeper] section
    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_pomkeeper_section(pyproject_toml):
        logger.debug("Found [tool.pomkeeper] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_pomkeeper_section(path: Path) -> bool:
    """Check if pyproject.toml contains a [tool.pomkeeper] section.

    An unreadable pyproject.toml is treated as having no section, since it
    was only ever a fallback location.
    """
    try:
        raw = _read_toml(path)
    except ConfigError as exc:
        logger.debug("Ignoring unreadable %s: %s", path, exc)
        return False
    return "pomkeeper" in raw.get("tool", {})


def load_config(config_path: Optional[Path] = None) -> PomKeeperConfig:
    """Load and validate pomkeeper configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`PomKeeperConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return PomKeeperConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get("pomkeeper", {})
    else:
        section = raw.get("pomkeeper", {})

    if not section:
        logger.debug("Config file found but has no pomkeeper section; using defaults")
        return PomKeeperConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _string_list(value: Any, option: str, config_path: str) -> List[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(
            f"{option} must be a list of strings, got {type(value).__name__}",
            config_path=config_path,
            option=option,
        )
    return list(value)


def _coordinate_list(value: Any, option: str, config_path: str) -> List[str]:
    coordinates = _string_list(value, option, config_path)
    for text in coordinates:
        try:
            Coordinate.parse(text)
        except ValueError as exc:
            raise ConfigError(
                f"{option}: {exc}",
                config_path=config_path,
                option=option,
            ) from exc
    return coordinates


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> PomKeeperConfig:
    """Parse and validate a ``[pomkeeper]`` / ``[tool.pomkeeper]`` table.

    Rejects unknown keys and type mismatches.

    Raises:
        ConfigError: Unknown keys or incorrect types (e.g., string for boolean).
    """
    config = PomKeeperConfig()

    known = set(_BOOL_OPTIONS) | set(_LIST_OPTIONS) | {"property_links", "timeout"}
    unknown = set(section.keys()) - known
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    for option in _BOOL_OPTIONS:
        if option not in section:
            continue
        val = section[option]
        if not isinstance(val, bool):
            raise ConfigError(
                f"{option} must be a boolean, got {type(val).__name__}",
                config_path=config_path,
                option=option,
            )
        setattr(config, option, val)

    for option in _LIST_OPTIONS:
        if option in section:
            setattr(config, option, _string_list(section[option], option, config_path))

    if "repositories" in section and not config.repositories:
        raise ConfigError(
            "repositories must name at least one repository",
            config_path=config_path,
            option="repositories",
        )

    if "property_links" in section:
        links = section["property_links"]
        if not isinstance(links, dict):
            raise ConfigError(
                f"property_links must be a table, got {type(links).__name__}",
                config_path=config_path,
                option="property_links",
            )
        config.property_links = {
            name: _coordinate_list(coords, f"property_links.{name}", config_path)
            for name, coords in links.items()
        }

    if "timeout" in section:
        val = section["timeout"]
        # bool is a subclass of int
        if isinstance(val, bool) or not isinstance(val, int) or val <= 0:
            raise ConfigError(
                f"timeout must be a positive integer, got {val!r}",
                config_path=config_path,
                option="timeout",
            )
        config.timeout = val

    return config
