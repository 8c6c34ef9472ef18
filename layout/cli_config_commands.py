"""Configuration commands for layout CLI (`show`, `set`)."""
from __future__ import annotations

from typing import Optional

import typer
import yaml
from rich.console import Console

from layout.cli_support import handle_cli_error, print_success
from layout.core.config import GIT_MODES, LayoutConfig, find_config_file
from layout.core.errors import ConfigError

show_app = typer.Typer(help="Show configuration", add_completion=False)
set_app = typer.Typer(help="Change configuration", add_completion=False)
_CONFIG_APPS_ATTACHED = False
console = Console()

CONFIG_OPTION_HELP = "Path to configuration file"


def register_config_commands(app: typer.Typer, shared_console: Console) -> None:
    """Attach show/set subcommands to the main Typer app."""
    global console, _CONFIG_APPS_ATTACHED
    console = shared_console

    if not _CONFIG_APPS_ATTACHED:
        app.add_typer(show_app, name="show")
        app.add_typer(set_app, name="set")
        _CONFIG_APPS_ATTACHED = True


def _update_config(config: Optional[str], update) -> None:
    """Load the configuration, apply ``update`` to it and save it back."""
    path = find_config_file(config)
    try:
        user_config = LayoutConfig.load(path)
        update(user_config)
        user_config.save(path)
    except (ConfigError, OSError) as e:
        handle_cli_error(e, console)
    print_success(console, f"Saved {path}")


@show_app.command("config-file")
def show_config_file(
    config: Optional[str] = typer.Option(None, "--config", "-c", envvar="LAYOUT_CONFIG", help=CONFIG_OPTION_HELP),
) -> None:
    """Show the location of the configuration file."""
    console.print(str(find_config_file(config)), soft_wrap=True)


@show_app.command("config")
def show_config(
    config: Optional[str] = typer.Option(None, "--config", "-c", envvar="LAYOUT_CONFIG", help=CONFIG_OPTION_HELP),
) -> None:
    """Show the current configuration."""
    try:
        user_config = LayoutConfig.load(find_config_file(config))
    except ConfigError as e:
        handle_cli_error(e, console)
    text = yaml.safe_dump(user_config.to_dict(), sort_keys=True).rstrip()
    console.print(text, soft_wrap=True, markup=False, emoji=False, highlight=False)


@set_app.command("default")
def set_default(
    pattern: str = typer.Argument(..., help="URL pattern for sources without abbreviation, {0} is the repository"),
    config: Optional[str] = typer.Option(None, "--config", "-c", envvar="LAYOUT_CONFIG", help=CONFIG_OPTION_HELP),
) -> None:
    """Set the default repository pattern."""

    def update(user_config: LayoutConfig) -> None:
        user_config.default = pattern

    _update_config(config, update)


@set_app.command("abbreviation")
def set_abbreviation(
    name: str = typer.Argument(..., help="Abbreviation used as `name:owner/repo`"),
    pattern: str = typer.Argument(..., help="URL pattern, {0} is the repository"),
    config: Optional[str] = typer.Option(None, "--config", "-c", envvar="LAYOUT_CONFIG", help=CONFIG_OPTION_HELP),
) -> None:
    """Add or replace an abbreviation."""

    def update(user_config: LayoutConfig) -> None:
        user_config.abbreviations[name] = pattern

    _update_config(config, update)


@set_app.command("git")
def set_git(
    mode: str = typer.Argument(..., help=f"Git client mode: {', '.join(GIT_MODES)}"),
    config: Optional[str] = typer.Option(None, "--config", "-c", envvar="LAYOUT_CONFIG", help=CONFIG_OPTION_HELP),
) -> None:
    """Set the git client mode."""
    if mode not in GIT_MODES:
        handle_cli_error(ConfigError(f"unknown git mode {mode!r}, use one of: {', '.join(GIT_MODES)}"), console)

    def update(user_config: LayoutConfig) -> None:
        user_config.git = mode

    _update_config(config, update)


@set_app.command("value")
def set_value(
    name: str = typer.Argument(..., help="Variable name"),
    value: str = typer.Argument(..., help="Value, parsed as YAML (true, 42, [a, b])"),
    config: Optional[str] = typer.Option(None, "--config", "-c", envvar="LAYOUT_CONFIG", help=CONFIG_OPTION_HELP),
) -> None:
    """Set a global default value used by every layout."""
    try:
        parsed = yaml.safe_load(value)
    except yaml.YAMLError:
        parsed = value

    def update(user_config: LayoutConfig) -> None:
        user_config.values[name] = parsed

    _update_config(config, update)
