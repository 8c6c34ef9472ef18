"""Helper functions available inside layout templates.

String and list helpers are registered as Jinja2 filters (``{{ name | snakecase }}``),
everything else as globals (``{{ get_root_file("go.mod") }}``).
"""
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

_WORD_BOUNDARY = re.compile(r"[A-Z]?[a-z0-9]+|[A-Z]+(?![a-z])")


def _words(text: str) -> List[str]:
    return _WORD_BOUNDARY.findall(str(text))


def snakecase(text: str) -> str:
    return "_".join(word.lower() for word in _words(text))


def kebabcase(text: str) -> str:
    return "-".join(word.lower() for word in _words(text))


def camelcase(text: str) -> str:
    """``hello world`` -> ``HelloWorld``."""
    return "".join(word[:1].upper() + word[1:].lower() for word in _words(text))


def trimprefix(text: str, prefix: str) -> str:
    return str(text).removeprefix(prefix)


def trimsuffix(text: str, suffix: str) -> str:
    return str(text).removesuffix(suffix)


def quote(text: Any) -> str:
    return '"' + str(text).replace("\\", "\\\\").replace('"', '\\"') + '"'


def squote(text: Any) -> str:
    return "'" + str(text) + "'"


def nindent(text: str, width: int) -> str:
    pad = " " * width
    return "\n" + "\n".join(pad + line for line in str(text).split("\n"))


def split(text: str, separator: str = ",") -> List[str]:
    return str(text).split(separator)


def uniq(items: Iterable[Any]) -> List[Any]:
    seen = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return seen


def has(collection: Any, item: Any) -> bool:
    """Membership test used by conditions and templates.

    Raises:
        TypeError: If ``collection`` is not a list, tuple, set, mapping or string
    """
    if not isinstance(collection, (list, tuple, set, frozenset, dict, str)):
        raise TypeError(f"has() expects a collection, got {type(collection).__name__}")
    return item in collection


def contains(text: str, part: str) -> bool:
    return part in str(text)


def hasprefix(text: str, prefix: str) -> bool:
    return str(text).startswith(prefix)


def hassuffix(text: str, suffix: str) -> bool:
    return str(text).endswith(suffix)


def env(name: str, default: str = "") -> str:
    return os.environ.get(name, default)


def now(fmt: str = "%Y-%m-%d") -> str:
    return datetime.now().strftime(fmt)


def find_submatch(pattern: str, text: str) -> str:
    """First capture group of the first match, or empty string."""
    match = re.search(pattern, text)
    if match is None or not match.groups():
        return ""
    return match.group(1) or ""


def find_submatch_all(pattern: str, text: str) -> List[str]:
    """First capture group of every match."""
    compiled = re.compile(pattern)
    if compiled.groups < 1:
        return []
    return [match.group(1) for match in compiled.finditer(text)]


def _find_root(work_dir: Path, name: str, want_dir: bool) -> Path:
    """Walk from ``work_dir`` up to the filesystem root looking for ``name``.

    Only the base name of ``name`` is used, so the lookup never leaves the
    chain of ancestor directories.
    """
    base = os.path.basename(os.path.normpath(name))
    if base in ("", ".", "..", os.sep):
        raise FileNotFoundError(f"invalid root file name {name!r}")

    current = work_dir.resolve()
    for directory in [current, *current.parents]:
        candidate = directory / base
        if want_dir and candidate.is_dir():
            return candidate
        if not want_dir and candidate.is_file():
            return candidate

    kind = "directory" if want_dir else "file"
    raise FileNotFoundError(f"{kind} {base!r} not found in {work_dir} or its parents")


def root_helpers(work_dir: Optional[Path] = None) -> Dict[str, Callable]:
    """Project-local helpers bound to ``work_dir`` (default: current directory)."""

    def start() -> Path:
        return work_dir or Path.cwd()

    def get_root_file(name: str) -> str:
        return _find_root(start(), name, want_dir=False).read_text()

    def get_root_file_path(name: str) -> str:
        return str(_find_root(start(), name, want_dir=False))

    def get_root_dir(name: str) -> str:
        return str(_find_root(start(), name, want_dir=True))

    return {
        "get_root_file": get_root_file,
        "get_root_file_path": get_root_file_path,
        "get_root_dir": get_root_dir,
    }


FILTERS: Dict[str, Callable] = {
    "snakecase": snakecase,
    "kebabcase": kebabcase,
    "camelcase": camelcase,
    "trimprefix": trimprefix,
    "trimsuffix": trimsuffix,
    "quote": quote,
    "squote": squote,
    "nindent": nindent,
    "split": split,
    "uniq": uniq,
}

GLOBALS: Dict[str, Callable] = {
    "has": has,
    "contains": contains,
    "hasprefix": hasprefix,
    "hassuffix": hassuffix,
    "split": split,
    "uniq": uniq,
    "add": lambda a, b: a + b,
    "sub": lambda a, b: a - b,
    "mul": lambda a, b: a * b,
    "div": lambda a, b: a // b if isinstance(a, int) and isinstance(b, int) else a / b,
    "mod": lambda a, b: a % b,
    "env": env,
    "now": now,
    "find_submatch": find_submatch,
    "find_submatch_all": find_submatch_all,
}
