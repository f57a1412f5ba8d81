"""Terminal prompts rendered with rich"""

import asyncio
import threading
from contextlib import contextmanager
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterator, Optional, Sequence, TypeVar

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from errors import PromptAbortedError

T = TypeVar("T")

BACK_WORDS = ("back", "b")


class Prompter:
    """
    Blocking rich prompts, run in a worker thread so the event loop (and
    with it the refresh task) keeps running while the operator types.
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self._pending: Optional[asyncio.Future] = None
        self._interrupted = False

    def _start(self, fn: Callable[..., T], *args, **kwargs) -> "asyncio.Future[T]":
        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def settle(result: Any, error: Optional[BaseException]) -> None:
            if future.done():
                return
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(result)

        def worker() -> None:
            try:
                result, error = fn(*args, **kwargs), None
            except BaseException as e:
                result, error = None, e
            try:
                loop.call_soon_threadsafe(settle, result, error)
            except RuntimeError:
                # loop already closed, nobody is waiting for this answer
                pass

        # daemon, so an abandoned read never holds up interpreter exit
        threading.Thread(target=worker, daemon=True, name="prompt").start()
        return future

    async def _run(self, fn: Callable[..., T], *args, **kwargs) -> T:
        self._pending = self._start(fn, *args, **kwargs)
        try:
            return await self._pending
        except asyncio.CancelledError:
            if not self._interrupted:
                raise
            raise PromptAbortedError() from None
        except EOFError as e:
            raise PromptAbortedError() from e
        finally:
            self._pending = None
            self._interrupted = False

    def interrupt(self) -> bool:
        """
        Abort the prompt currently waiting for an answer.

        Returns False when no prompt is open. The abandoned reader thread
        stays blocked until the terminal delivers its next line.
        """
        # TODO: read input through loop.add_reader so an aborted prompt stops consuming stdin
        if self._pending is None or self._pending.done():
            return False
        self._interrupted = True
        self._pending.cancel()
        return True

    def _select(self, title: str, options: Sequence[str]) -> int:
        table = Table(show_header=False, box=box.SIMPLE, padding=(0, 1))
        table.add_column(style="cyan", justify="right")
        table.add_column()
        for index, option in enumerate(options, 1):
            table.add_row(str(index), option)
        self.console.print(Panel(table, title=f"[bold]{title}[/]", expand=False))

        choice = IntPrompt.ask(
            "Select",
            console=self.console,
            choices=[str(index) for index in range(1, len(options) + 1)],
            show_choices=False,
            default=1,
        )
        return choice - 1

    async def select(self, title: str, options: Sequence[str]) -> int:
        """Show a numbered menu and return the zero-based index picked"""
        return await self._run(self._select, title, list(options))

    async def ask_text(self, prompt: str, default: Optional[str] = None) -> Optional[str]:
        """Free text input. Blank or `back` returns None."""
        if default is None:
            value = await self._run(Prompt.ask, prompt, console=self.console)
        else:
            value = await self._run(Prompt.ask, prompt, console=self.console, default=default)
        value = (value or "").strip()
        if not value or value.lower() in BACK_WORDS:
            return None
        return value

    async def ask_int(self, prompt: str, default: Optional[int] = None) -> Optional[int]:
        while True:
            value = await self.ask_text(prompt, None if default is None else str(default))
            if value is None:
                return None
            try:
                return int(value)
            except ValueError:
                self.console.print("[red]Enter a whole number[/red]")

    async def ask_decimal(self, prompt: str, default: Optional[Decimal] = None) -> Optional[Decimal]:
        while True:
            value = await self.ask_text(prompt, None if default is None else str(default))
            if value is None:
                return None
            try:
                amount = Decimal(value)
            except InvalidOperation:
                self.console.print("[red]Invalid format. Enter a number (e.g. 0.1)[/red]")
                continue
            if not amount.is_finite() or amount <= 0:
                self.console.print("[red]Amount must be greater than 0[/red]")
                continue
            return amount

    async def confirm(self, prompt: str, default: bool = False) -> bool:
        return await self._run(Confirm.ask, prompt, console=self.console, default=default)

    async def acknowledge(self) -> None:
        await self._run(Prompt.ask, "[dim]Press Enter to go back[/dim]", console=self.console, default="", show_default=False)

    @contextmanager
    def status(self, label: str) -> Iterator[None]:
        """Busy indicator, cleared however the block exits"""
        with self.console.status(label, spinner="moon"):
            yield

    def clear(self) -> None:
        self.console.clear()

    def print(self, *objects: Any, **kwargs) -> None:
        self.console.print(*objects, **kwargs)

    def print_json(self, data: Any) -> None:
        self.console.print_json(data=data)
