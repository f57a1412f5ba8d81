"""
Busy indicator and cancellable waiting.

`race` runs an operation against a cancel watcher and settles on whichever
finishes first. The loser is cancelled and the watcher is always closed,
so no key poll or companion process outlives the call. Cancelling only
stops the wait: whatever the operation started server-side keeps going.
"""

import asyncio
import logging
import sys
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Generic, Optional, TypeVar, Union

from config import settings
from errors import WatcherError

if TYPE_CHECKING:
    from prompts.console import Prompter

logger = logging.getLogger(__name__)

T = TypeVar("T")

ENTER_KEYS = ("\r", "\n")


@dataclass(frozen=True)
class Completed(Generic[T]):
    value: T


@dataclass(frozen=True)
class Errored:
    error: Exception


@dataclass(frozen=True)
class Cancelled:
    pass


Outcome = Union[Completed[T], Errored, Cancelled]


class CancelWatcher:
    """Something that resolves once the operator asks to stop waiting"""

    async def start(self) -> None:
        pass

    async def wait(self) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        pass


def poll_enter(timeout: float) -> bool:
    """Return True if enter was pressed within `timeout` seconds"""
    if sys.platform == "win32":
        import msvcrt
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if msvcrt.kbhit() and msvcrt.getwch() in ENTER_KEYS:
                return True
            time.sleep(0.05)
        return False

    import select
    ready, _, _ = select.select([sys.stdin], [], [], timeout)
    return bool(ready) and sys.stdin.read(1) in ENTER_KEYS


class KeyPressWatcher(CancelWatcher):
    """Polls the controlling terminal for enter from inside this process"""

    def __init__(self, poll: Callable[[float], bool] = poll_enter, poll_interval: float = 0.2):
        self._poll = poll
        self._poll_interval = poll_interval
        self._closed = threading.Event()
        self._saved_mode: Optional[Any] = None
        self._poll_future: Optional[asyncio.Future] = None

    async def start(self) -> None:
        if sys.platform == "win32" or not sys.stdin.isatty():
            return
        import termios
        import tty
        fd = sys.stdin.fileno()
        self._saved_mode = termios.tcgetattr(fd)
        tty.setcbreak(fd)

    async def wait(self) -> None:
        while not self._closed.is_set():
            self._poll_future = asyncio.ensure_future(asyncio.to_thread(self._poll, self._poll_interval))
            # shielded so a cancelled wait leaves the poll visible to close()
            if await asyncio.shield(self._poll_future):
                return
        # closed without a key press: never resolve
        await asyncio.Event().wait()

    async def close(self) -> None:
        self._closed.set()
        if self._poll_future is not None and not self._poll_future.done():
            # the worker thread may still be reading stdin, let it finish first
            await asyncio.wait({self._poll_future})
        self._poll_future = None
        if self._saved_mode is not None:
            import termios
            termios.tcsetattr(sys.stdin.fileno(), termios.TCSADRAIN, self._saved_mode)
            self._saved_mode = None

    @property
    def closed(self) -> bool:
        return self._closed.is_set()


class ProcessWatcher(CancelWatcher):
    """
    Companion process that exits cleanly once enter is hit.

    Keeps working while this process is busy rendering, since the key
    handling lives elsewhere. Any non-zero exit is a watcher failure,
    never a cancellation.
    """

    def __init__(self, executable: Path, label: str, stdin: Optional[int] = None):
        self.executable = executable
        self.label = label
        self.stdin = stdin
        self.process: Optional[asyncio.subprocess.Process] = None

    async def start(self) -> None:
        if not self.executable.exists():
            raise WatcherError(f"Cancel watcher not found at {self.executable}")
        try:
            self.process = await asyncio.create_subprocess_exec(
                sys.executable, str(self.executable), self.label, stdin=self.stdin
            )
        except OSError as e:
            raise WatcherError(f"Unable to start cancel watcher: {e}") from e
        logger.info(f"Started cancel watcher pid={self.process.pid}")

    async def wait(self) -> None:
        returncode = await self.process.wait()
        if returncode != 0:
            raise WatcherError(f"Cancel watcher exited with status {returncode}")

    async def close(self) -> None:
        if self.process is None or self.process.returncode is not None:
            return
        try:
            self.process.kill()
        except ProcessLookupError:
            pass
        await self.process.wait()
        logger.info(f"Killed cancel watcher pid={self.process.pid}")


def make_watcher(label: str) -> CancelWatcher:
    if settings.cancel_source == "keypress":
        return KeyPressWatcher()
    return ProcessWatcher(settings.watcher_executable(), label)


async def race(operation: Awaitable[T], watcher: CancelWatcher) -> Outcome:
    """
    Wait for `operation` or for `watcher`, whichever comes first.

    Returns Completed / Errored when the operation settles first (ties go
    to the operation) and Cancelled when the watcher fires. Raises
    WatcherError if the watcher fails.
    """
    try:
        await watcher.start()
    except BaseException:
        if asyncio.iscoroutine(operation):
            operation.close()
        await watcher.close()
        raise

    operation_task = asyncio.ensure_future(operation)
    watcher_task = asyncio.ensure_future(watcher.wait())
    try:
        await asyncio.wait({operation_task, watcher_task}, return_when=asyncio.FIRST_COMPLETED)

        if operation_task.done():
            error = operation_task.exception()
            if error is None:
                return Completed(operation_task.result())
            return Errored(error)

        watcher_task.result()
        return Cancelled()
    finally:
        pending = [task for task in (operation_task, watcher_task) if not task.done()]
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        await watcher.close()


class Loader:
    """Shows a busy indicator while an operation runs"""

    def __init__(self, prompter: "Prompter"):
        self.prompter = prompter
        self.prompt = "Loading"

    def with_prompt(self, prompt: str) -> "Loader":
        self.prompt = prompt
        return self

    async def interact(self, operation: Awaitable[T]) -> T:
        with self.prompter.status(self.prompt):
            return await operation

    async def interact_with_cancel(
        self,
        operation: Awaitable[T],
        watcher: Optional[CancelWatcher] = None,
    ) -> Outcome:
        watcher = watcher or make_watcher(self.prompt)
        with self.prompter.status(f"{self.prompt} [dim]| hit enter to cancel[/dim]"):
            return await race(operation, watcher)
