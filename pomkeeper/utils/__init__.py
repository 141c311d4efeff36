"""
Utility helpers for pomkeeper.

- Console output helpers (Rich-based)
- Logging configuration and retrieval
- Filesystem safety helpers
- Synchronous HTTP client
- Version change classification

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

from pomkeeper.utils.filesystem import (
    create_timestamped_backup,
    safe_read_file,
    safe_write_file,
)
from pomkeeper.utils.logger import (
    disable_logging,
    get_logger,
    is_logging_configured,
    setup_logging,
)
from pomkeeper.utils.console import (
    colorize_update_type,
    print_error,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)
from pomkeeper.utils.http import HTTPClient
from pomkeeper.utils.version_utils import get_update_type

__all__ = [
    # Console
    "print_error",
    "print_table",
    "print_success",
    "print_warning",
    "reconfigure_console",
    "colorize_update_type",
    # Logging
    "get_logger",
    "setup_logging",
    "disable_logging",
    "is_logging_configured",
    # Filesystem
    "safe_read_file",
    "safe_write_file",
    "create_timestamped_backup",
    # HTTP
    "HTTPClient",
    # Version utilities
    "get_update_type",
]
