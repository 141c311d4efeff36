"""
pomkeeper: keep Maven dependency versions moving forward.

pomkeeper looks at the versions declared in a ``pom.xml`` (plain
dependencies, dependency management, the parent reference and version
properties), asks the configured Maven repositories which versions exist,
and rewrites only the version text that needs to change.

Features include:
    • Latest or next-version selection
    • Major / minor / incremental segment locking
    • Snapshot-aware filtering
    • All-or-nothing updates of shared version properties
    • Byte-for-byte preservation of everything else in the POM
"""

from __future__ import annotations

from pomkeeper.__version__ import __version__

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "pomkeeper Contributors"
__license__ = "Apache-2.0"
__description__ = "Structure-preserving version updates for Maven POM files."

__all__ = [
    "__version__",
]
