"""
Terminal console for the BSC trading service
Login -> pick a project or snipe a deployer -> trade from custody wallets
"""

import asyncio
import logging
import signal
from typing import Optional

from rich.text import Text

from api_client import BackendAPI
from config import settings
from errors import PromptAbortedError, UnauthorizedError
from handlers import AppContext, dispatch
from models import SessionStore, StoreSnapshot
from prompts import Prompter
from refresher import Refresher
from states import Exit, Failed, Login, Next, Screen
from utils import format_native, short_address, token_ui_amount

# Logging setup, kept off the terminal the prompts draw on
logging.basicConfig(
    filename=settings.log_file,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=settings.log_level.upper()
)
logger = logging.getLogger(__name__)

BANNER = r"""
 ____  _   _ __  __ ____     ____ ___  _   _ ____   ___  _     _____
|  _ \| | | |  \/  |  _ \   / ___/ _ \| \ | / ___| / _ \| |   | ____|
| |_) | | | | |\/| | |_) | | |  | | | |  \| \___ \| | | | |   |  _|
|  __/| |_| | |  | |  __/  | |__| |_| | |\  |___) | |_| | |___| |___
|_|    \___/|_|  |_|_|      \____\___/|_| \_|____/ \___/|_____|_____|
"""


class App:
    """Drives the screens and keeps the status banner on top"""

    def __init__(self, store: SessionStore, prompter: Prompter, refresher: Refresher):
        self.store = store
        self.prompter = prompter
        self.refresher = refresher
        self.ctx = AppContext(store=store, prompter=prompter)
        self._task: Optional[asyncio.Task] = None

    def render_status(self, snapshot: StoreSnapshot) -> None:
        symbol = f"[cyan]{settings.native_symbol}[/cyan]"
        user = snapshot.user
        project = snapshot.active_project

        if user is not None:
            self.prompter.print(f"fee_payer: {user.address}")
            self.prompter.print(f"fee_payer_balance: {format_native(user.balance_wei)} {symbol}")
            self.prompter.print(f"wallets_balance: {format_native(user.wallets_balance_wei)} {symbol}")
            if project is not None:
                tokens = token_ui_amount(user.wallets_token_balance, settings.token_decimals)
                self.prompter.print(f"wallets_token_balance: {tokens:.2f} [magenta]{project.name.upper()}[/magenta]")

        if snapshot.active_project_id is not None:
            status = snapshot.automation_status
            self.prompter.print(f"automation_status: {status.label if status else 'not started'}")
            if project is not None:
                token_address = project.token_address or "not deployed"
                self.prompter.print(f"token_address: {token_address}")
                self.prompter.print(f"deployer: {short_address(project.deployer)}")

        self.prompter.print("")

    async def report_refresh_failure(self) -> None:
        self.prompter.print("\n[yellow]Connection to backend failed ⚠️[/yellow]")
        self.prompter.print(Text(self.refresher.error or "", style="dim"))
        try:
            await self.prompter.acknowledge()
        except PromptAbortedError:
            pass

    async def report_failure(self, failed: Failed) -> None:
        self.prompter.print(f"[yellow]{failed.error.category} ⚠️[/yellow]")
        self.prompter.print(Text(f"  - {failed.error.detail}", style="dim"))
        await self.prompter.acknowledge()

    def _on_interrupt(self) -> None:
        """Ctrl-C backs out of an open prompt, anywhere else it stops the console"""
        if self.prompter.interrupt():
            logger.info("Prompt aborted")
            return
        logger.info("Interrupted outside a prompt, shutting down")
        if self._task is not None:
            self._task.cancel()

    def _install_interrupt_handler(self) -> bool:
        loop = asyncio.get_running_loop()
        try:
            loop.add_signal_handler(signal.SIGINT, self._on_interrupt)
        except NotImplementedError:
            # Windows event loops keep the default KeyboardInterrupt behaviour
            logger.info("SIGINT handler not supported on this platform")
            return False
        return True

    async def run(self, screen: Screen) -> None:
        self._task = asyncio.current_task()
        handles_interrupt = self._install_interrupt_handler()
        self.refresher.start()
        try:
            while True:
                self.prompter.clear()
                self.prompter.print(Text(BANNER, style="bold"))
                self.render_status(await self.store.snapshot())

                if self.refresher.done():
                    await self.report_refresh_failure()
                    return

                result = await dispatch(screen, self.ctx)

                if isinstance(result, Exit):
                    logger.info("Exit selected")
                    return
                if isinstance(result, Next):
                    screen = result.screen
                    continue

                try:
                    await self.report_failure(result)
                except PromptAbortedError:
                    return
                if isinstance(result.error, UnauthorizedError):
                    # session is no longer valid whatever screen raised it
                    screen = Login()
                else:
                    screen = result.fallback
        finally:
            if handles_interrupt:
                asyncio.get_running_loop().remove_signal_handler(signal.SIGINT)
            await self.refresher.stop()


async def _main() -> None:
    api = BackendAPI()
    store = SessionStore(api)
    prompter = Prompter()
    app = App(store, prompter, Refresher(store))

    logger.info(f"Starting console against {settings.api_base_url}")
    try:
        await app.run(Login())
    finally:
        await api.close()


def run():
    """Console entry point"""
    try:
        asyncio.run(_main())
    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.info("Interrupted")


if __name__ == "__main__":
    run()
