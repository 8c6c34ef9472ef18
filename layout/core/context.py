"""Cooperative cancellation for a single layout run."""
import threading
from typing import IO, Optional

from layout.core.errors import Cancelled
from layout.core.logger import get_logger

logger = get_logger(__name__)


class RunContext:
    """Cancellation flag shared by every step of one run.

    The pipeline calls :meth:`check` at the top of each state-resolution
    iteration; hook subprocesses poll :attr:`cancelled` while they run.
    """

    def __init__(self):
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        if not self._event.is_set():
            logger.debug("Run cancelled")
        self._event.set()

    def check(self) -> None:
        """Raise Cancelled if the run was cancelled."""
        if self._event.is_set():
            raise Cancelled("operation cancelled")

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._event.wait(timeout)


def background() -> RunContext:
    """Return a fresh context that is never cancelled unless asked to."""
    return RunContext()


def watch_input(ctx: RunContext, stream: IO) -> threading.Thread:
    """Close ``stream`` once ``ctx`` is cancelled.

    A blocking read on the stream is released with an error, which the
    dialog reports as an interruption.
    """

    def _watch():
        ctx.wait()
        try:
            stream.close()
        except OSError as exc:
            logger.debug(f"Failed to close input stream: {exc}")

    thread = threading.Thread(target=_watch, name="layout-input-watcher", daemon=True)
    thread.start()
    return thread
