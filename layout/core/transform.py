"""In-place rendering of file names and contents in the destination tree."""
import fnmatch
import os
from pathlib import Path
from typing import Callable, Iterable, List, Sequence, Set, Union

from layout.core.errors import LayoutError
from layout.core.fs_tree import remove_path
from layout.core.logger import get_logger
from layout.rendering.engine import Renderer

logger = get_logger(__name__)

PathLike = Union[str, Path]


def walk(path: PathLike, handler: Callable[[str, os.DirEntry], None]) -> None:
    """Visit every entry below ``path``, tolerating changes made by ``handler``.

    Entries of one level are snapshotted and handled first. The directory is
    then listed again, so renames, removals and files created by hooks are
    seen before descending into the subdirectories.
    """
    with os.scandir(path) as it:
        entries = sorted(it, key=lambda e: e.name)
    for entry in entries:
        handler(str(path), entry)

    with os.scandir(path) as it:
        subdirs = sorted(e.name for e in it if e.is_dir(follow_symlinks=False))
    for name in subdirs:
        walk(os.path.join(path, name), handler)


def render_names(root_dir: PathLike, renderer: Renderer) -> None:
    """Render the base name of every entry below ``root_dir``.

    Same name: left untouched. Empty name (after trimming): the entry and
    its subtree are removed. Otherwise the entry is renamed.

    Raises:
        LayoutError: If a name cannot be rendered or the entry cannot be moved
    """

    def handle(directory: str, entry: os.DirEntry) -> None:
        old_path = os.path.join(directory, entry.name)
        try:
            rendered = renderer.render(entry.name).strip()
        except LayoutError as exc:
            raise type(exc)(f"render name of {old_path}: {exc}") from exc

        if rendered == entry.name:
            return
        try:
            if not rendered:
                remove_path(old_path)
                return
            new_path = os.path.join(directory, rendered)
            logger.debug(f"Rename {old_path} -> {new_path}")
            os.rename(old_path, new_path)
        except OSError as exc:
            raise LayoutError(f"rename {old_path}: {exc}") from exc

    walk(root_dir, handle)


def files_to_ignore(root_dir: PathLike, patterns: Iterable[str]) -> Set[str]:
    """Expand ignore globs (relative to ``root_dir``) into a set of absolute paths.

    ``*``, ``?`` and ``[...]`` match within one path segment, including names
    starting with a dot; ``**`` matches any number of segments.
    """
    root = os.path.abspath(root_dir)
    compiled = [_split(pattern) for pattern in patterns if pattern]
    ignored: Set[str] = set()
    if not compiled:
        return ignored

    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = os.path.relpath(dirpath, root)
        for name in dirnames + filenames:
            parts = _split(os.path.join(rel_dir, name))
            if any(_match_parts(pattern, parts) for pattern in compiled):
                ignored.add(os.path.join(dirpath, name))
    return ignored


def _split(path: str) -> List[str]:
    return [part for part in path.replace(os.sep, "/").split("/") if part not in ("", ".")]


def _match_parts(pattern: Sequence[str], parts: Sequence[str]) -> bool:
    if not pattern:
        return not parts
    head = pattern[0]
    if head == "**":
        return any(_match_parts(pattern[1:], parts[i:]) for i in range(len(parts) + 1))
    if not parts or not fnmatch.fnmatchcase(parts[0], head):
        return False
    return _match_parts(pattern[1:], parts[1:])


def render_contents(root_dir: PathLike, renderer: Renderer, ignore: Iterable[str] = ()) -> None:
    """Render every regular, non-ignored file below ``root_dir`` in place.

    The original permission bits are kept.

    Raises:
        LayoutError: If a file cannot be read, rendered or written
    """
    ignored = files_to_ignore(root_dir, ignore)
    root = os.path.abspath(root_dir)

    for dirpath, _, filenames in os.walk(root):
        for name in sorted(filenames):
            path = os.path.join(dirpath, name)
            if path in ignored or os.path.islink(path):
                continue
            try:
                mode = os.stat(path).st_mode
                with open(path, encoding="utf-8", newline="") as f:
                    content = f.read()
            except UnicodeDecodeError:
                logger.warning(f"Skip rendering of binary file {path}")
                continue
            except OSError as exc:
                raise LayoutError(f"read content of {path}: {exc}") from exc

            try:
                data = renderer.render(content)
            except LayoutError as exc:
                raise type(exc)(f"render {path}: {exc}") from exc

            try:
                with open(path, "w", encoding="utf-8", newline="") as f:
                    f.write(data)
                os.chmod(path, mode)
            except OSError as exc:
                raise LayoutError(f"write {path}: {exc}") from exc
            logger.debug(f"Rendered {path}")
