"""Tracking of files copied from a layout into the destination."""
import os
import shutil
from pathlib import Path
from typing import Callable, List, Optional, Union

from layout.core.errors import LayoutError
from layout.core.logger import get_logger

logger = get_logger(__name__)


class FSTree:
    """Tree mirroring the hierarchy of copied files.

    The root node holds the destination path as its name; every other node
    holds a single path segment. Nodes can be renamed or removed without
    rescanning the filesystem.
    """

    def __init__(self, name: str, is_dir: bool = False, parent: Optional["FSTree"] = None):
        self.name = name
        self.is_dir = is_dir
        self.children: List["FSTree"] = []
        self.parent = parent

    def __repr__(self) -> str:
        return f"FSTree({self.path()!r}, is_dir={self.is_dir})"

    def path(self) -> str:
        """Path of this node from the root node."""
        if self.parent is None:
            return self.name
        return os.path.join(self.parent.path(), self.name)

    def paths(self) -> List[str]:
        """This node's path followed by every descendant path, depth first."""
        result = [self.path()]
        for child in self.children:
            result.extend(child.paths())
        return result

    def add(self, rel_path: str, is_dir: bool) -> "FSTree":
        """Add ``rel_path`` (relative to this node), creating intermediate directories."""
        parts = Path(rel_path).parts
        current = self
        for i, part in enumerate(parts):
            current = current._child(part, is_dir or i != len(parts) - 1)
        return current

    def _child(self, name: str, is_dir: bool) -> "FSTree":
        for child in self.children:
            if child.name == name:
                return child
        child = FSTree(name, is_dir, parent=self)
        self.children.append(child)
        return child

    def render(self, render_name: Callable[["FSTree"], str]) -> None:
        """Apply ``render_name`` to this node and its descendants, top-down.

        Same name keeps the node, empty name removes the node with its
        subtree, anything else renames it. Children are visited after their
        parent was renamed, so they are addressed by the updated path.
        """
        new_name = render_name(self).strip()
        if new_name == self.name:
            self._render_children(render_name)
            return

        if not new_name:
            remove_path(self.path())
            if self.parent is not None:
                self.parent.children = [c for c in self.parent.children if c is not self]
            return

        old_path = self.path()
        self.name = new_name
        new_path = self.path()
        logger.debug(f"Rename {old_path} -> {new_path}")
        os.rename(old_path, new_path)
        self._render_children(render_name)

    def _render_children(self, render_name: Callable[["FSTree"], str]) -> None:
        for child in list(self.children):
            child.render(render_name)


def remove_path(path: Union[str, Path]) -> None:
    logger.debug(f"Remove {path}")
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    elif os.path.lexists(path):
        os.unlink(path)


def copy_tree(src: Union[str, Path], dest: Union[str, Path]) -> FSTree:
    """Copy the content of ``src`` into ``dest`` preserving permission bits.

    Existing directories in ``dest`` are reused, existing files overwritten.

    Returns:
        Tree of every copied entry, rooted at ``dest``

    Raises:
        LayoutError: If an entry cannot be copied, with the offending path
    """
    src = Path(src)
    dest = Path(dest)
    root = FSTree(str(dest), is_dir=True)

    for dirpath, dirnames, filenames in os.walk(src):
        dirnames.sort()
        current = Path(dirpath)
        rel_dir = current.relative_to(src)

        for name in dirnames:
            rel_path = rel_dir / name
            target = dest / rel_path
            root.add(str(rel_path), is_dir=True)
            try:
                target.mkdir(exist_ok=True)
                shutil.copymode(current / name, target)
            except OSError as exc:
                raise LayoutError(f"create directory {target}: {exc}") from exc

        for name in sorted(filenames):
            rel_path = rel_dir / name
            target = dest / rel_path
            root.add(str(rel_path), is_dir=False)
            try:
                shutil.copyfile(current / name, target)
                shutil.copymode(current / name, target)
            except OSError as exc:
                raise LayoutError(f"copy content ({rel_path}): {exc}") from exc

    return root
