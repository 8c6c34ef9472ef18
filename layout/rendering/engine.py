"""Template rendering engine."""
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from jinja2 import Environment, StrictUndefined, TemplateError

from layout.core.errors import RenderError
from layout.models.manifest import Delimiters
from layout.rendering.helpers import FILTERS, GLOBALS, root_helpers


def create_environment(
    delimiters: Optional[Delimiters] = None, work_dir: Optional[Path] = None
) -> Environment:
    """Build the Jinja2 environment used for names, contents, defaults and hooks.

    Block and comment tags are derived from the variable delimiters
    (``{{% if x %}}`` and ``{{# note #}}`` by default), so a lone ``{%`` or
    ``{#`` in file content is plain text.

    Args:
        delimiters: Variable delimiters (defaults to ``{{`` / ``}}``)
        work_dir: Start directory for the root file helpers (defaults to cwd)

    Returns:
        Environment with strict undefined handling and the helper library
    """
    delimiters = delimiters or Delimiters()
    env = Environment(
        undefined=StrictUndefined,
        autoescape=False,
        keep_trailing_newline=True,
        variable_start_string=delimiters.open,
        variable_end_string=delimiters.close,
        block_start_string=delimiters.open + "%",
        block_end_string="%" + delimiters.close,
        comment_start_string=delimiters.open + "#",
        comment_end_string="#" + delimiters.close,
    )
    env.filters.update(FILTERS)
    env.globals.update(GLOBALS)
    env.globals.update(root_helpers(work_dir))
    return env


class Renderer:
    """Renders template strings against the run state.

    The renderer holds a reference to the state, so values saved with
    :meth:`save` are visible to every later render. Rendering itself never
    modifies the state.
    """

    def __init__(
        self,
        state: Optional[Dict[str, Any]] = None,
        delimiters: Optional[Delimiters] = None,
        work_dir: Optional[Path] = None,
    ):
        self.state: Dict[str, Any] = state if state is not None else {}
        self.delimiters = delimiters or Delimiters()
        self.env = create_environment(self.delimiters, work_dir)
        self._crlf_env: Optional[Environment] = None

    def render(self, text: str) -> str:
        """Render ``text`` against the current state.

        Raises:
            RenderError: On malformed syntax, undefined names or helper failures
        """
        if not text:
            return text
        try:
            return self._environment_for(text).from_string(text).render(self.state)
        except TemplateError as exc:
            raise RenderError(f"render {_preview(text)!r}: {exc}") from exc
        except (OSError, ValueError, TypeError, ArithmeticError) as exc:
            raise RenderError(f"render {_preview(text)!r}: {exc}") from exc

    def _environment_for(self, text: str) -> Environment:
        # Jinja rewrites every line break to newline_sequence
        if "\r\n" not in text:
            return self.env
        if self._crlf_env is None:
            self._crlf_env = self.env.overlay(newline_sequence="\r\n")
        return self._crlf_env

    def save(self, name: str, value: Any) -> None:
        self.state[name] = value


def render(text: str, state: Mapping[str, Any], delimiters: Optional[Delimiters] = None) -> str:
    """Render one template string with a throwaway renderer."""
    return Renderer(dict(state), delimiters).render(text)


def _preview(text: str, limit: int = 60) -> str:
    text = text.strip()
    if len(text) > limit:
        return text[:limit] + "..."
    return text
