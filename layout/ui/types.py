"""Dialog and display interface used by the pipeline."""
from typing import List, Protocol, runtime_checkable

from layout.core.errors import Interrupted, InvalidInput

__all__ = ["Dialog", "UI", "Interrupted", "InvalidInput"]


@runtime_checkable
class Dialog(Protocol):
    """Collects raw answers from the user.

    Implementations raise :class:`InvalidInput` for answers they can reject
    themselves (unknown option numbers) and :class:`Interrupted` on end of
    input or user interruption.
    """

    def ask_one(self, question: str, default: str) -> str:
        """One free-form value."""

    def ask_many(self, question: str, default: List[str]) -> List[str]:
        """Free-form list of values."""

    def select_one(self, question: str, default: str, options: List[str]) -> str:
        """One value out of ``options``."""

    def choose_many(self, question: str, default: List[str], options: List[str]) -> List[str]:
        """Several values out of ``options``."""


@runtime_checkable
class UI(Dialog, Protocol):
    """Dialog plus informational output."""

    def title(self, message: str) -> None:
        ...

    def info(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...
