"""Git cloning for remote layouts."""
import subprocess
from pathlib import Path
from typing import List, Optional, Tuple, Union

from layout.core.config import get_settings
from layout.core.context import RunContext
from layout.core.errors import HookError, SourceError
from layout.core.logger import get_logger
from layout.core.hooks import run_process

logger = get_logger(__name__)

# --recurse-submodules on clone is available since git 2.13
SUBMODULES_MIN_VERSION = (2, 13)


def _run_git_command(args: List[str], cwd: Optional[Path] = None) -> Tuple[bool, str, str]:
    """Run a git command and return success, stdout, stderr."""
    try:
        result = subprocess.run(
            [get_settings().git_binary] + args,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=True
        )
        return True, result.stdout.strip(), result.stderr.strip()
    except subprocess.CalledProcessError as e:
        return False, e.stdout.strip() if e.stdout else "", e.stderr.strip() if e.stderr else str(e)
    except FileNotFoundError:
        return False, "", "Git not found. Please install git first."


def parse_git_version(output: str) -> Optional[Tuple[int, ...]]:
    """Extract the numeric version from ``git --version`` output.

    >>> parse_git_version("git version 2.39.3 (Apple Git-145)")
    (2, 39, 3)
    """
    for word in output.split():
        parts = word.split(".")
        if len(parts) >= 2 and parts[0].isdigit() and parts[1].isdigit():
            numbers = []
            for part in parts:
                if not part.isdigit():
                    break
                numbers.append(int(part))
            return tuple(numbers)
    return None


class GitClient:
    """Clones repositories with the git binary.

    Clones are shallow (depth 1) from the default branch. Submodules are
    cloned recursively when the installed git supports it.
    """

    def __init__(self, mode: str = "auto"):
        self.mode = mode
        self._version: Optional[Tuple[int, ...]] = None

    def version(self) -> Optional[Tuple[int, ...]]:
        if self._version is None:
            success, stdout, stderr = _run_git_command(["--version"])
            if not success:
                raise SourceError(f"git is not available: {stderr}")
            self._version = parse_git_version(stdout)
        return self._version

    def clone_args(self, url: str, directory: Union[str, Path]) -> List[str]:
        args = [get_settings().git_binary, "clone", "--depth", "1"]
        if self.mode == "native":
            args.append("--recurse-submodules")
        else:
            version = self.version()
            if version is not None and version >= SUBMODULES_MIN_VERSION:
                args.append("--recurse-submodules")
            else:
                logger.warning(f"git {version} does not support --recurse-submodules, cloning without")
        args.extend([url, str(directory)])
        return args

    def clone(self, ctx: RunContext, url: str, directory: Union[str, Path]) -> None:
        """Clone ``url`` into ``directory``.

        Raises:
            SourceError: If git fails
            Cancelled: If the run was cancelled during the clone
        """
        logger.debug(f"Cloning {url} into {directory}")
        try:
            code = run_process(ctx, self.clone_args(url, directory), Path.cwd())
        except HookError as exc:
            raise SourceError(f"clone {url}: {exc}") from exc
        if code != 0:
            raise SourceError(f"clone {url}: git exited with code {code}")
