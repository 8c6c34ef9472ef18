"""Plain line-based dialog, suitable for pipes and automation."""
import sys
from typing import IO, List, Optional

from layout.core.errors import Interrupted, InvalidInput
from layout.models.manifest import to_list


class SimpleUI:
    """Reads answers line by line from ``in_stream`` and writes prompts to ``out_stream``.

    An empty answer selects the default. Options are picked by their
    1-based number.
    """

    def __init__(self, in_stream: Optional[IO[str]] = None, out_stream: Optional[IO[str]] = None):
        self.in_stream = in_stream if in_stream is not None else sys.stdin
        self.out_stream = out_stream if out_stream is not None else sys.stdout

    def ask_one(self, question: str, default: str) -> str:
        self._print(question, "? ")
        if default:
            self._print("[default: ", default, "] ")
        return self._read_line(default)

    def ask_many(self, question: str, default: List[str]) -> List[str]:
        self._print(question, "? (comma-separated) ")
        if default:
            self._print("[default: ", ",".join(default), "] ")
        return to_list(self._read_line(",".join(default)))

    def select_one(self, question: str, default: str, options: List[str]) -> str:
        self._print_options(question, options)
        self._print("Pick the option ")
        if default:
            self._print("[default: ", default, "] ")
        self._print(": ")

        default_line = str(options.index(default) + 1) if default in options else ""
        picked = self._read_options(options, default_line)
        if not picked:
            raise InvalidInput("no option selected")
        return picked[0]

    def choose_many(self, question: str, default: List[str], options: List[str]) -> List[str]:
        self._print_options(question, options)
        self._print("Choose options (comma-separated) ")
        if default:
            self._print("[default: ", ",".join(default), "] ")
        self._print(": ")

        default_line = ",".join(str(options.index(item) + 1) for item in default if item in options)
        return self._read_options(options, default_line)

    def title(self, message: str) -> None:
        self._print("\n\n", message, "\n\n")

    def info(self, message: str) -> None:
        self._print("[info] ", message, "\n")

    def error(self, message: str) -> None:
        self._print("[error] ", message, "\n")

    def _print_options(self, question: str, options: List[str]) -> None:
        self._print(question, "\n")
        for i, option in enumerate(options, start=1):
            self._print(str(i), " - ", option, "\n")

    def _print(self, *parts: str) -> None:
        self.out_stream.write("".join(parts))
        self.out_stream.flush()

    def _read_line(self, default: str) -> str:
        try:
            line = self.in_stream.readline()
        except (ValueError, OSError) as exc:
            # closed by the cancellation watcher
            raise Interrupted(f"read input: {exc}") from exc
        except KeyboardInterrupt:
            raise Interrupted("interrupted") from None
        if not line:
            raise Interrupted("end of input")
        value = line.strip()
        return value or default

    def _read_options(self, options: List[str], default_line: str) -> List[str]:
        line = self._read_line(default_line)
        result: List[str] = []
        for item in to_list(line):
            try:
                num = int(item)
            except ValueError:
                raise InvalidInput(f"option {item!r} is not a number") from None
            if num < 1 or num > len(options):
                raise InvalidInput(f"unknown option {num}")
            if options[num - 1] not in result:
                result.append(options[num - 1])
        return result
