"""Condition evaluation for ``when`` fields.

Conditions are Jinja2 expressions (``foo < 100 and has(features, "docker")``)
evaluated in a sandbox where every state variable is a top-level name.
"""
from typing import Any, Dict, Mapping, Optional, Protocol

from jinja2 import StrictUndefined, TemplateError
from jinja2.sandbox import SandboxedEnvironment

from layout.core.errors import ConditionError
from layout.rendering.helpers import has


class ExpressionEvaluator(Protocol):
    """Capability needed by :class:`Condition` from an expression engine."""

    def evaluate(self, expression: str, bindings: Mapping[str, Any]) -> Any:
        ...


class SandboxEvaluator:
    """Evaluates expressions with a sandboxed Jinja2 environment."""

    def __init__(self):
        self.env = SandboxedEnvironment(undefined=StrictUndefined)
        self.env.globals["has"] = has

    def evaluate(self, expression: str, bindings: Mapping[str, Any]) -> Any:
        compiled = self.env.compile_expression(expression, undefined_to_none=False)
        return compiled(**bindings)


_default_evaluator: Optional[ExpressionEvaluator] = None


def default_evaluator() -> ExpressionEvaluator:
    global _default_evaluator
    if _default_evaluator is None:
        _default_evaluator = SandboxEvaluator()
    return _default_evaluator


def sanitize_state(state: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy state for the sandbox; sequences become fresh generic lists."""
    bindings: Dict[str, Any] = {}
    for key, value in state.items():
        if isinstance(value, (list, tuple)):
            value = list(value)
        bindings[key] = value
    return bindings


class Condition:
    """Boolean expression gating a prompt, computed value or hook."""

    def __init__(self, expression: Optional[str], evaluator: Optional[ExpressionEvaluator] = None):
        self.expression = (expression or "").strip()
        self.evaluator = evaluator or default_evaluator()

    def __bool__(self) -> bool:
        return bool(self.expression)

    def __repr__(self) -> str:
        return f"Condition({self.expression!r})"

    def eval(self, state: Mapping[str, Any]) -> bool:
        """Evaluate the expression; an empty expression is false.

        Raises:
            ConditionError: On syntax errors, unknown names, helper failures
                or a non-boolean result
        """
        if not self.expression:
            return False
        try:
            result = self.evaluator.evaluate(self.expression, sanitize_state(state))
        except TemplateError as exc:
            raise ConditionError(f"evaluate {self.expression!r}: {exc}") from exc
        except (TypeError, ValueError, ArithmeticError, LookupError) as exc:
            raise ConditionError(f"evaluate {self.expression!r}: {exc}") from exc

        if not isinstance(result, bool):
            raise ConditionError(
                f"condition {self.expression!r} returned {type(result).__name__}, not boolean"
            )
        return result

    def ok(self, state: Mapping[str, Any]) -> bool:
        """Like :meth:`eval`, but an empty expression means "always run"."""
        if not self.expression:
            return True
        return self.eval(state)
