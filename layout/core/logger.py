"""Logging for layout: Rich console output plus an optional log file.

Every module logger is a child of the ``layout`` logger, which owns the
handlers; levels are switched in one place by :func:`set_verbose`.
"""
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "layout"
LOG_FILE_NAME = "layout.log"

# Console for log records; stdout stays free for prompts and command output
console = Console(stderr=True)

_file_handler: Optional[logging.FileHandler] = None


def _root() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        handler = RichHandler(console=console, show_path=False, markup=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
        root.setLevel(logging.INFO)
    return root


def default_log_file() -> Path:
    """``LAYOUT_LOG_FILE`` or ``<tmp>/layout.log``."""
    if env_file := os.environ.get("LAYOUT_LOG_FILE"):
        return Path(env_file)
    return Path(tempfile.gettempdir()) / LOG_FILE_NAME


def setup_file_logging(log_file: Optional[str] = None, verbose: bool = False) -> Path:
    """Mirror layout log records into a file.

    Args:
        log_file: Path to log file (defaults to :func:`default_log_file`)
        verbose: Record debug messages too

    Returns:
        Path of the log file actually used; an unwritable target falls
        back to the temp dir
    """
    global _file_handler

    root = _root()
    if _file_handler is not None:
        _file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        return Path(_file_handler.baseFilename)

    target = Path(log_file) if log_file else default_log_file()
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(target)
    except PermissionError:
        target = Path(tempfile.gettempdir()) / LOG_FILE_NAME
        handler = logging.FileHandler(target)

    handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(name)s | %(levelname)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(handler)
    _file_handler = handler

    root.debug(f"Log file: {target}")
    return target


def set_verbose(verbose: bool) -> None:
    """Switch layout logging between INFO and DEBUG."""
    _root().setLevel(logging.DEBUG if verbose else logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """Get a logger for ``name`` (typically ``__name__``) under the layout root.

    Names outside the ``layout`` package are placed below it, so their
    records reach the same handlers.
    """
    _root()
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
