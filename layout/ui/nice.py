"""Rich-styled interactive dialog."""
from typing import List, Optional

from rich.console import Console
from rich.prompt import Prompt

from layout.core.errors import Interrupted, InvalidInput
from layout.models.manifest import to_list


class NiceUI:
    """Interactive dialog rendered with Rich.

    Options may be picked by number or by their exact text.
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def ask_one(self, question: str, default: str) -> str:
        return self._ask(f"[bold]{question}[/bold]", default)

    def ask_many(self, question: str, default: List[str]) -> List[str]:
        answer = self._ask(f"[bold]{question}[/bold] [dim](comma-separated)[/dim]", ",".join(default))
        return to_list(answer)

    def select_one(self, question: str, default: str, options: List[str]) -> str:
        self._show_options(question, options)
        picked = self._pick(self._ask("Pick the option", default), options)
        if len(picked) != 1:
            raise InvalidInput("pick exactly one option")
        return picked[0]

    def choose_many(self, question: str, default: List[str], options: List[str]) -> List[str]:
        self._show_options(question, options)
        return self._pick(self._ask("Choose options [dim](comma-separated)[/dim]", ",".join(default)), options)

    def title(self, message: str) -> None:
        self.console.print()
        self.console.rule(f"[bold cyan]{message}[/bold cyan]")
        self.console.print()

    def info(self, message: str) -> None:
        self.console.print(f"[blue]->[/blue] {message}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {message}")

    def _show_options(self, question: str, options: List[str]) -> None:
        self.console.print(f"[bold]{question}[/bold]")
        for i, option in enumerate(options, start=1):
            self.console.print(f"  [cyan]{i}[/cyan] - {option}")

    def _ask(self, prompt: str, default: str) -> str:
        try:
            if default:
                answer = Prompt.ask(prompt, console=self.console, default=default)
            else:
                answer = Prompt.ask(prompt, console=self.console, default="", show_default=False)
        except (EOFError, KeyboardInterrupt):
            raise Interrupted("interrupted") from None
        except (ValueError, OSError) as exc:
            raise Interrupted(f"read input: {exc}") from exc
        return (answer or "").strip()

    @staticmethod
    def _pick(answer: str, options: List[str]) -> List[str]:
        picked: List[str] = []
        for item in to_list(answer):
            if item in options:
                value = item
            elif item.isdigit() and 1 <= int(item) <= len(options):
                value = options[int(item) - 1]
            else:
                raise InvalidInput(f"unknown option {item}")
            if value not in picked:
                picked.append(value)
        return picked
