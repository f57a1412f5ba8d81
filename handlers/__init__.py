"""Handlers module exports"""

import logging
from typing import Awaitable, Callable, Dict, Type

from errors import AppError, UnhandledError
from states import (
    AutomationMenu,
    Buy,
    CancelSnipe,
    CreateProject,
    CreateSnipe,
    DeleteProject,
    DeleteWallet,
    Deposit,
    Export,
    Failed,
    ImportWallet,
    Login,
    MainMenu,
    ProjectMenu,
    RecoverFunds,
    Screen,
    SelectProject,
    Sell,
    Send,
    Signup,
    StartAutomation,
    StopAutomation,
    Transition,
    WalletMenu,
    Withdraw,
)

from .auth import login, signup
from .automation import automation_menu, start_automation, stop_automation
from .common import AppContext, select_wallet
from .main_menu import export, main_menu
from .project import create_project, delete_project, project_menu, select_project
from .snipe import cancel_snipe, create_snipe
from .trade import buy, sell
from .wallet import delete_wallet, deposit, import_wallet, recover_funds, send, wallet_menu, withdraw

logger = logging.getLogger(__name__)

Handler = Callable[[Screen, AppContext], Awaitable[Transition]]

HANDLERS: Dict[Type[Screen], Handler] = {
    Login: login,
    Signup: signup,
    MainMenu: main_menu,
    Export: export,
    ProjectMenu: project_menu,
    CreateProject: create_project,
    SelectProject: select_project,
    DeleteProject: delete_project,
    CreateSnipe: create_snipe,
    CancelSnipe: cancel_snipe,
    Buy: buy,
    Sell: sell,
    WalletMenu: wallet_menu,
    Withdraw: withdraw,
    Deposit: deposit,
    Send: send,
    ImportWallet: import_wallet,
    DeleteWallet: delete_wallet,
    RecoverFunds: recover_funds,
    AutomationMenu: automation_menu,
    StartAutomation: start_automation,
    StopAutomation: stop_automation,
}


def fallback_for(screen: Screen) -> Screen:
    """Where to resume when a screen blows up without choosing a fallback"""
    if isinstance(screen, (Login, Signup)):
        return Login()
    return MainMenu()


async def dispatch(screen: Screen, ctx: AppContext) -> Transition:
    """Run the handler for `screen` and return where to go next"""
    handler = HANDLERS.get(type(screen))
    if handler is None:
        raise TypeError(f"No handler for screen {type(screen).__name__}")

    try:
        return await handler(screen, ctx)
    except AppError as e:
        logger.error(f"{type(screen).__name__} failed: {e}")
        return Failed(fallback_for(screen), e)
    except Exception as e:
        logger.exception(f"Unexpected error in {type(screen).__name__}")
        return Failed(fallback_for(screen), UnhandledError(str(e)))


__all__ = [
    'AppContext',
    'HANDLERS',
    'dispatch',
    'fallback_for',
    'select_wallet',
    'login',
    'signup',
    'main_menu',
    'export',
    'project_menu',
    'select_project',
    'create_project',
    'delete_project',
    'create_snipe',
    'cancel_snipe',
    'buy',
    'sell',
    'wallet_menu',
    'import_wallet',
    'delete_wallet',
    'recover_funds',
    'withdraw',
    'deposit',
    'send',
    'automation_menu',
    'start_automation',
    'stop_automation',
]
