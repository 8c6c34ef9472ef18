"""Execution of before/after hooks.

A hook is either inline shell text (``run``) or a script invocation
(``script: "hooks/setup.sh --flag"``). Both are rendered as templates first;
a script's content is rendered too and executed from a temporary copy.
"""
import os
import shlex
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Union

from layout.core.config import get_settings
from layout.core.context import RunContext
from layout.core.errors import Cancelled, HookError, LayoutError
from layout.core.logger import get_logger
from layout.models.manifest import Hook, Runnable
from layout.rendering.conditions import Condition
from layout.rendering.engine import Renderer
from layout.ui.types import UI

logger = get_logger(__name__)

PathLike = Union[str, Path]


def run_process(ctx: RunContext, args: Sequence[str], cwd: PathLike) -> int:
    """Run ``args`` in ``cwd`` with inherited stdout/stderr until exit or cancellation.

    Returns:
        Process exit code

    Raises:
        Cancelled: If the run was cancelled (or interrupted) while the process ran
    """
    logger.debug(f"Exec {' '.join(shlex.quote(a) for a in args)} in {cwd}")
    try:
        proc = subprocess.Popen(list(args), cwd=str(cwd))
    except OSError as exc:
        raise HookError(f"start {args[0]}: {exc}") from exc
    try:
        while True:
            try:
                return proc.wait(timeout=0.1)
            except subprocess.TimeoutExpired:
                if ctx.cancelled:
                    _terminate(proc)
                    raise Cancelled(f"process {args[0]} cancelled")
    except KeyboardInterrupt:
        _terminate(proc)
        ctx.cancel()
        raise Cancelled(f"process {args[0]} interrupted") from None


def _terminate(proc: subprocess.Popen) -> None:
    if proc.poll() is not None:
        return
    proc.terminate()
    try:
        proc.wait(timeout=get_settings().hook_terminate_timeout)
    except subprocess.TimeoutExpired:
        proc.kill()
        proc.wait()


class ShellRunner(Protocol):
    """Runs inline shell text inside a working directory."""

    def run(self, ctx: RunContext, script: str, work_dir: PathLike) -> int:
        ...


class SubprocessShell:
    """POSIX shell found on PATH (``sh``, then ``bash``), or ``LAYOUT_SHELL``."""

    def __init__(self, shell: Optional[str] = None):
        self.shell = shell

    def executable(self) -> str:
        shell = self.shell or get_settings().shell
        if shell:
            return shell
        for candidate in ("sh", "bash"):
            found = shutil.which(candidate)
            if found:
                return found
        raise HookError("no POSIX shell (sh or bash) found on PATH")

    def run(self, ctx: RunContext, script: str, work_dir: PathLike) -> int:
        return run_process(ctx, [self.executable(), "-c", script], work_dir)


def render_runnable(runnable: Runnable, renderer: Renderer) -> Runnable:
    """Copy of ``runnable`` with ``run`` and ``script`` rendered."""
    try:
        run = renderer.render(runnable.run)
    except LayoutError as exc:
        raise type(exc)(f"render run: {exc}") from exc
    try:
        script = renderer.render(runnable.script)
    except LayoutError as exc:
        raise type(exc)(f"render script: {exc}") from exc
    return runnable.model_copy(update={"run": run, "script": script})


def split_invocation(script: str) -> List[str]:
    """Split a script invocation into the script path and its arguments."""
    try:
        tokens = shlex.split(script)
    except ValueError as exc:
        raise HookError(f"parse script invocation {script!r}: {exc}") from exc
    if not tokens:
        raise HookError(f"empty script invocation {script!r}")
    return tokens


def execute_script(
    ctx: RunContext, invocation: str, renderer: Renderer, work_dir: PathLike, layout_dir: PathLike
) -> int:
    """Render the script named by ``invocation`` into a temp file and execute it.

    Only the script token is replaced by the temp file; the arguments are
    passed unchanged.
    """
    script_name, *args = split_invocation(invocation)
    script_path = Path(layout_dir) / os.path.normpath(script_name)

    try:
        content = script_path.read_text()
    except OSError as exc:
        raise HookError(f"read hook script content {script_path}: {exc}") from exc

    try:
        rendered = renderer.render(content)
    except LayoutError as exc:
        raise type(exc)(f"render hook script content {script_path}: {exc}") from exc

    with tempfile.NamedTemporaryFile("w", prefix="layout-hook-", delete=False) as f:
        tmp_name = f.name
        f.write(rendered)
    try:
        os.chmod(tmp_name, 0o700)
        return run_process(ctx, [tmp_name, *args], work_dir)
    except OSError as exc:
        raise HookError(f"execute {script_name}: {exc}") from exc
    finally:
        os.unlink(tmp_name)


def execute_runnable(
    ctx: RunContext,
    runnable: Runnable,
    renderer: Renderer,
    work_dir: PathLike,
    layout_dir: PathLike,
    shell: Optional[ShellRunner] = None,
) -> None:
    """Render and execute a runnable; the script form takes priority.

    Raises:
        HookError: If the command cannot be started or exits non-zero
    """
    rendered = render_runnable(runnable, renderer)
    if rendered.script:
        code = execute_script(ctx, rendered.script, renderer, work_dir, layout_dir)
    else:
        code = (shell or SubprocessShell()).run(ctx, rendered.run, work_dir)

    if code != 0:
        raise HookError(f"{rendered.what()!r} exited with code {code}")


def execute_hook(
    ctx: RunContext,
    hook: Hook,
    renderer: Renderer,
    work_dir: PathLike,
    layout_dir: PathLike,
    ui: Optional[UI] = None,
    shell: Optional[ShellRunner] = None,
) -> bool:
    """Run ``hook`` if its condition holds, showing its label first.

    Returns:
        True if the hook was executed, False if its condition skipped it
    """
    if not Condition(hook.when).ok(renderer.state):
        logger.debug(f"Skip hook {hook.what()!r}")
        return False

    if hook.label and ui is not None:
        ui.info(hook.label)

    execute_runnable(ctx, hook, renderer, work_dir, layout_dir, shell)
    return True


def execute_hooks(
    ctx: RunContext,
    hooks: Sequence[Hook],
    renderer: Renderer,
    work_dir: PathLike,
    layout_dir: PathLike,
    ui: Optional[UI] = None,
    stage: str = "hook",
    shell: Optional[ShellRunner] = None,
) -> None:
    """Run hooks in order; the first failure aborts the rest."""
    for i, hook in enumerate(hooks):
        ctx.check()
        try:
            execute_hook(ctx, hook, renderer, work_dir, layout_dir, ui, shell)
        except Cancelled:
            raise
        except LayoutError as exc:
            raise type(exc)(f"execute {stage} #{i} ({hook.label or hook.what()}): {exc}") from exc
