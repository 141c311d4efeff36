"""
pomkeeper version information.

Single source of truth for the package version, read by the build backend
and by the ``--version`` flag.
"""

from __future__ import annotations

__version__ = "0.3.0"

#: Human-readable version (for CLI)
VERSION_STRING = f"pomkeeper {__version__}"
