"""Click subcommands of the ``pomkeeper`` CLI."""
