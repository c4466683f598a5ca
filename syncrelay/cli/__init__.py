"""syncrelay CLI — Typer-based command-line interface.

Provides the ``syncrelay`` command with subcommands for serving a relay's
webhooks, computing webhook URLs and previewing rich-text conversion.

All output uses Rich for formatted terminal display.
"""
