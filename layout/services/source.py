"""Materializing a layout source as a local directory.

Resolution order for a source string:

1. an existing local directory is used as-is;
2. a source without ``:`` is a shorthand (``owner/repo``) expanded through
   the default pattern;
3. ``alias:repo`` with a known alias is expanded through the alias pattern;
4. anything else is a git URL.

Patterns use ``{0}`` as the placeholder for the repository part.
"""
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple

from layout.core.config import DEFAULT_REPO_PATTERN
from layout.core.context import RunContext
from layout.core.logger import get_logger
from layout.services.git_client import GitClient

logger = get_logger(__name__)


def split_abbreviation(text: str) -> Tuple[str, str]:
    """Split ``alias:repo`` into its parts; no alias yields an empty alias."""
    alias, sep, repo = text.partition(":")
    if not sep:
        return "", text
    return alias, repo


def source_url(
    source: str,
    aliases: Optional[Dict[str, str]] = None,
    default_pattern: str = "",
) -> str:
    """Expand shorthand and aliases into a clonable URL."""
    aliases = aliases or {}
    alias, repo = split_abbreviation(source)

    if ":" not in source:
        return (default_pattern or DEFAULT_REPO_PATTERN).replace("{0}", source)
    if alias in aliases:
        return aliases[alias].replace("{0}", repo)
    return source


@contextmanager
def resolve_source(
    ctx: RunContext,
    source: str,
    aliases: Optional[Dict[str, str]] = None,
    default_pattern: str = "",
    git: Optional[GitClient] = None,
) -> Iterator[Path]:
    """Yield a local directory holding the layout named by ``source``.

    Remote sources are cloned into a temporary directory which is removed
    when the context exits, whatever the outcome.

    Raises:
        SourceError: If the clone fails
    """
    local = Path(source)
    if local.is_dir():
        logger.debug(f"Using local layout {local}")
        yield local
        return

    url = source_url(source, aliases, default_pattern)
    with tempfile.TemporaryDirectory(prefix="layout-") as tmp_dir:
        (git or GitClient()).clone(ctx, url, tmp_dir)
        yield Path(tmp_dir)
