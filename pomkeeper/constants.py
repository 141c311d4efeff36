"""
Centralized constants for pomkeeper.

This module defines immutable configuration values used across pomkeeper,
including repository endpoints, POM element paths, the snapshot pattern and
logging formats. All values are intended to be treated as read-only.
"""

from typing import Final, Sequence

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = "pomkeeper/{version}"

# ---------------------------------------------------------------------------
# Maven repositories
# ---------------------------------------------------------------------------

#: Repository consulted when no repository is configured.
MAVEN_CENTRAL_URL: Final[str] = "https://repo1.maven.org/maven2"

#: Per-artifact metadata document listing every deployed version.
MAVEN_METADATA_PATH: Final[str] = "{group_path}/{artifact_id}/maven-metadata.xml"

# ---------------------------------------------------------------------------
# HTTP configuration
# ---------------------------------------------------------------------------

#: Default network timeout in seconds.
DEFAULT_TIMEOUT: Final[int] = 30

#: Maximum number of retries for failed HTTP requests.
DEFAULT_MAX_RETRIES: Final[int] = 3

# ---------------------------------------------------------------------------
# Versions
# ---------------------------------------------------------------------------

#: A snapshot is either ``X-SNAPSHOT`` or a deployed timestamped snapshot
#: ``X-yyyyMMdd.HHmmss-N``.
SNAPSHOT_PATTERN: Final[str] = r"^(.+)-((SNAPSHOT)|(\d{8}\.\d{6}-\d+))$"

# ---------------------------------------------------------------------------
# POM layout
# ---------------------------------------------------------------------------

#: Default manifest file name.
POM_FILE_NAME: Final[str] = "pom.xml"

#: Default ``<packaging>`` / dependency ``<type>``.
DEFAULT_TYPE: Final[str] = "jar"

#: Element paths (from ``project``) under which a ``dependency`` is governed.
DEPENDENCY_CONTAINER_PATHS: Final[Sequence[str]] = (
    "project/dependencies",
    "project/dependencyManagement/dependencies",
    "project/build/plugins/plugin/dependencies",
    "project/build/pluginManagement/plugins/plugin/dependencies",
    "project/profiles/profile/dependencies",
    "project/profiles/profile/dependencyManagement/dependencies",
    "project/profiles/profile/build/plugins/plugin/dependencies",
    "project/profiles/profile/build/pluginManagement/plugins/plugin/dependencies",
)

#: Upper bound on nested ``${...}`` expansion while interpolating.
MAX_INTERPOLATION_DEPTH: Final[int] = 10

# ---------------------------------------------------------------------------
# Configuration defaults
# ---------------------------------------------------------------------------

DEFAULT_ALLOW_SNAPSHOTS: Final[bool] = False
DEFAULT_ALLOW_MAJOR_UPDATES: Final[bool] = True
DEFAULT_ALLOW_MINOR_UPDATES: Final[bool] = True
DEFAULT_ALLOW_INCREMENTAL_UPDATES: Final[bool] = True
DEFAULT_EXCLUDE_REACTOR: Final[bool] = True
DEFAULT_PROCESS_DEPENDENCIES: Final[bool] = True
DEFAULT_PROCESS_DEPENDENCY_MANAGEMENT: Final[bool] = True
DEFAULT_PROCESS_PARENT: Final[bool] = False
DEFAULT_PROCESS_PROPERTIES: Final[bool] = False
DEFAULT_PROCESS_SNAPSHOTS_ONLY: Final[bool] = False
DEFAULT_AUTO_LINK_ITEMS: Final[bool] = True

# ---------------------------------------------------------------------------
# Security constraints
# ---------------------------------------------------------------------------

#: Maximum allowed file size (in bytes) when reading POM files.
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
