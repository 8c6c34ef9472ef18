#!/usr/bin/env python3
"""layout CLI - scaffold projects from templates."""

import typer
from rich.console import Console

from layout import __version__
from layout.cli_config_commands import register_config_commands
from layout.cli_new_commands import register_new_commands

app = typer.Typer(
    name="layout",
    help="""layout - project generator from templates

A layout is a directory (local or git) with layout.yaml and content/.

Quick start:
  layout new reddec/layout-example my-project   # Answer questions, get a project
  layout set abbreviation gl git@gitlab.com:{0}.git
  layout new gl:owner/repo my-project
  layout show config                            # Inspect settings

More commands: layout --help
""",
    add_completion=False,
)

console = Console()

# Attach modular subcommands
register_new_commands(app, console)
register_config_commands(app, console)


@app.command()
def version():
    """Show layout version."""
    console.print(f"layout {__version__}")


if __name__ == "__main__":
    app()
