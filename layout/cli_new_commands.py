"""`layout new` - deploy a layout into a directory."""
import os
import shutil
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from layout import __version__
from layout.cli_support import (
    handle_cli_error,
    install_cancel_handlers,
    print_success,
    read_source_file,
)
from layout.core.config import LayoutConfig, find_config_file
from layout.core.context import RunContext, watch_input
from layout.core.errors import ConfigError
from layout.core.logger import get_logger, set_verbose, setup_file_logging
from layout.core.pipeline import DeployConfig, deploy
from layout.services.git_client import GitClient
from layout.ui.nice import NiceUI
from layout.ui.simple import SimpleUI

# Module-level instances (will be set by register function)
console: Console = Console()
logger = get_logger(__name__)

UI_MODES = ("nice", "simple")


def new(
    source: Optional[str] = typer.Argument(
        None,
        help="URL, abbreviation or path to layout. If not set, the .layout file is read",
    ),
    dest: Optional[str] = typer.Argument(
        None,
        help="Destination directory, created if missing. Defaults to the current directory",
    ),
    config: Optional[str] = typer.Option(
        None, "--config", "-c", envvar="LAYOUT_CONFIG", help="Path to configuration file"
    ),
    version: str = typer.Option(
        __version__, "--version", envvar="LAYOUT_VERSION",
        help="Override application version to bypass manifest restriction",
    ),
    ui: str = typer.Option("nice", "--ui", "-u", envvar="LAYOUT_UI", help="UI mode: nice or simple"),
    debug: bool = typer.Option(False, "--debug", "-d", envvar="LAYOUT_DEBUG", help="Enable debug mode"),
    ask_once: bool = typer.Option(
        False, "--ask-once", "-a", envvar="LAYOUT_ASK_ONCE",
        help="Do not retry on wrong user input, good for automation",
    ),
    disable_cleanup: bool = typer.Option(
        False, "--disable-cleanup", "-D", envvar="LAYOUT_DISABLE_CLEANUP",
        help="Keep created directories in case of failure",
    ),
):
    """Create a new project from a layout.

    Examples:
        layout new reddec/layout-example my-project   # GitHub shorthand
        layout new gh:owner/repo                      # Alias from config
        layout new ./my-layout /tmp/demo --ui simple  # Local directory
    """
    if ui not in UI_MODES:
        console.print(f"[red]Error:[/red] unknown UI mode {ui!r}, use one of: {', '.join(UI_MODES)}")
        raise typer.Exit(2)

    set_verbose(debug)
    if debug:
        setup_file_logging(verbose=True)

    dest = dest or os.getcwd()

    try:
        source = source or read_source_file()
        user_config = LayoutConfig.load(find_config_file(config))
    except (FileNotFoundError, ConfigError) as e:
        handle_cli_error(e, console, verbose=debug)

    ctx = RunContext()
    restore_handlers = install_cancel_handlers(ctx)
    display = NiceUI(console) if ui == "nice" else SimpleUI(sys.stdin, sys.stdout)
    watch_input(ctx, sys.stdin)

    created_destination = not Path(dest).exists()
    logger.debug(f"Deploying {source} into {dest} (git mode {user_config.git})")

    try:
        deploy(
            DeployConfig(
                source=source,
                target=dest,
                aliases=user_config.abbreviations,
                default_pattern=user_config.default,
                display=display,
                version=version,
                ask_once=ask_once,
                defaults=user_config.values,
                git=GitClient(user_config.git),
            ),
            ctx,
        )
    except (Exception, KeyboardInterrupt) as e:
        if created_destination and not disable_cleanup and Path(dest).exists():
            logger.debug(f"Removing {dest} created by the failed run")
            shutil.rmtree(dest, ignore_errors=True)
        handle_cli_error(e, console, verbose=debug)
    else:
        print_success(console, f"Project generated in {dest}")
    finally:
        ctx.cancel()
        restore_handlers()


def register_new_commands(app: typer.Typer, shared_console: Console):
    """Register the new command with the main Typer app.

    Args:
        app: Main Typer application
        shared_console: Shared Rich console instance
    """
    global console
    console = shared_console

    app.command()(new)
