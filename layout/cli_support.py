"""Shared utilities for layout CLI modules."""
from __future__ import annotations

import signal
from pathlib import Path
from typing import Callable, Optional

import typer
from rich.console import Console
from rich.markup import escape

from layout.core.context import RunContext
from layout.core.errors import Cancelled, Interrupted

# File with the default source for `layout new` without arguments
LAYOUT_SOURCE_FILE = ".layout"


def read_source_file(path: Optional[Path] = None) -> str:
    """Read the layout source stored in the ``.layout`` file.

    Raises:
        FileNotFoundError: If the file doesn't exist
    """
    path = path or Path(LAYOUT_SOURCE_FILE)
    if not path.exists():
        raise FileNotFoundError(f"neither source set nor {path} file exists")
    return path.read_text().strip()


def install_cancel_handlers(ctx: RunContext) -> Callable[[], None]:
    """Cancel ``ctx`` on SIGINT/SIGTERM, then interrupt the main thread.

    Returns:
        Function restoring the previous handlers
    """

    def _handler(signum, frame):
        ctx.cancel()
        raise KeyboardInterrupt

    signals = [signal.SIGINT]
    if hasattr(signal, "SIGTERM"):
        signals.append(signal.SIGTERM)
    previous = {signum: signal.signal(signum, _handler) for signum in signals}

    def restore() -> None:
        for signum, handler in previous.items():
            signal.signal(signum, handler)

    return restore


def handle_cli_error(
    e: Exception,
    console: Console,
    verbose: bool = False,
    exit_code: int = 1
) -> None:
    """Handle CLI errors with consistent formatting.

    Args:
        e: Exception to handle
        console: Rich console for output
        verbose: Show exception traceback if True
        exit_code: Exit code to use (interruptions always exit with 130)
    """
    if isinstance(e, (Cancelled, Interrupted, KeyboardInterrupt)):
        console.print(f"[yellow]Interrupted:[/yellow] {escape(str(e)) or 'cancelled'}")
        raise typer.Exit(130)
    console.print(f"[red]Error:[/red] {escape(str(e))}")
    if verbose:
        console.print_exception()
    raise typer.Exit(exit_code)


def print_success(console: Console, message: str, prefix: str = "✓") -> None:
    """Print success message with consistent formatting.

    Args:
        console: Rich console for output
        message: Success message
        prefix: Prefix symbol (default: ✓)
    """
    console.print(f"[green]{prefix}[/green] {message}")
