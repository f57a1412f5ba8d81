"""Context and helpers shared by every screen handler"""

import logging
from dataclasses import dataclass
from typing import Optional

from api_client import BackendAPI
from config import settings
from errors import ProjectNotFoundError, UserNotFoundError
from loader import Loader
from models import Project, SessionStore, User, Wallet
from prompts import Prompter
from utils import format_native, short_address, token_ui_amount

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """What a handler gets to work with: the session store and the terminal"""
    store: SessionStore
    prompter: Prompter

    async def api(self) -> BackendAPI:
        return await self.store.service.get()

    def loader(self, prompt: str) -> Loader:
        return Loader(self.prompter).with_prompt(prompt)


async def require_active_project(ctx: AppContext) -> Project:
    """Active project, re-validated against the known projects"""
    project = await ctx.store.get_active_project()
    if project is None:
        raise ProjectNotFoundError()
    return project


async def require_user(ctx: AppContext) -> User:
    user = await ctx.store.user.get()
    if user is None:
        raise UserNotFoundError()
    return user


def wallet_label(address: str, wallet: Wallet) -> str:
    label = f"{short_address(address)} {format_native(wallet.balance_wei)} {settings.native_symbol}"
    if wallet.token_balance is not None:
        label += f" {token_ui_amount(wallet.token_balance, settings.token_decimals):.2f} TOKENS"
    return label


async def select_wallet(ctx: AppContext) -> Optional[Wallet]:
    """Let the operator pick one of their custody wallets. None means back."""
    user = await ctx.store.user.get()
    wallets = list(user.wallets.items()) if user is not None else []

    labels = [wallet_label(address, wallet) for address, wallet in wallets]
    labels.append("Back")

    index = await ctx.prompter.select("Select Wallet", labels)
    if index == len(labels) - 1:
        return None
    return wallets[index][1]
