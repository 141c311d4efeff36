"""
Executable module for pomkeeper.

Running:
    python -m pomkeeper

is equivalent to:
    pomkeeper
"""

from __future__ import annotations

import sys


def main() -> int:
    """Forward ``python -m pomkeeper`` to the CLI entry point.

    Returns:
        Exit code returned by the CLI.
    """
    # Import lazily so click/rich are only loaded during CLI use
    from pomkeeper.cli import main as cli_main

    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
