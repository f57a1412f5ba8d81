"""Custody wallet screens"""

import logging

from config import settings
from errors import AppError, UserNotFoundError
from handlers.common import AppContext, require_user, select_wallet
from prompts import WalletMenuOption, choose
from states import (
    DeleteWallet,
    Deposit,
    Failed,
    ImportWallet,
    MainMenu,
    Next,
    RecoverFunds,
    Send,
    Transition,
    WalletMenu,
    Withdraw,
)
from utils import parse_address, parse_private_key, to_wei

logger = logging.getLogger(__name__)

WALLET_MENU_SCREENS = {
    WalletMenuOption.WITHDRAW: Withdraw,
    WalletMenuOption.DEPOSIT: Deposit,
    WalletMenuOption.SEND: Send,
    WalletMenuOption.DELETE: DeleteWallet,
}


async def wallet_menu(screen: WalletMenu, ctx: AppContext) -> Transition:
    wallet = await select_wallet(ctx)
    if wallet is None:
        return Next(MainMenu())

    option = await choose(ctx.prompter, "Wallet menu", WalletMenuOption)
    if option is WalletMenuOption.BACK:
        return Next(MainMenu())
    return Next(WALLET_MENU_SCREENS[option](wallet=wallet))


async def import_wallet(screen: ImportWallet, ctx: AppContext) -> Transition:
    raw_key = await ctx.prompter.ask_text("Enter the private key to import")
    if raw_key is None:
        return Next(MainMenu())

    api = await ctx.api()
    try:
        signer = parse_private_key(raw_key)
        wallet = await ctx.loader("import_wallet in progress").interact(api.import_wallet(signer))
    except AppError as e:
        return Failed(MainMenu(), e)

    await ctx.store.add_wallet(wallet)
    logger.info(f"Imported wallet {wallet.address}")
    return Next(MainMenu())


async def delete_wallet(screen: DeleteWallet, ctx: AppContext) -> Transition:
    delete = await ctx.prompter.confirm("Are you sure you want to delete this wallet?", default=False)
    if not delete:
        return Next(WalletMenu())

    api = await ctx.api()
    try:
        await ctx.loader("delete_wallet in progress").interact(api.delete_wallet(screen.wallet.id))
    except AppError as e:
        return Failed(WalletMenu(), e)

    await ctx.store.remove_wallet(screen.wallet.address)
    logger.info(f"Deleted wallet {screen.wallet.address}")
    return Next(MainMenu())


async def recover_funds(screen: RecoverFunds, ctx: AppContext) -> Transition:
    confirm = await ctx.prompter.confirm(
        f"[yellow]This will send all the {settings.native_symbol} in your wallets to fee_payer[/yellow]\n"
        "Do you want to continue?",
        default=False,
    )
    if not confirm:
        return Next(MainMenu())

    api = await ctx.api()
    try:
        await ctx.loader("recover_funds in progress").interact(api.recover_funds())
    except AppError as e:
        return Failed(MainMenu(), e)

    return Next(MainMenu())


async def withdraw(screen: Withdraw, ctx: AppContext) -> Transition:
    """Send funds from a custody wallet back to the fee payer"""
    amount = await ctx.prompter.ask_decimal(f"Enter the {settings.native_symbol} amount")
    if amount is None:
        return Next(WalletMenu())

    try:
        user = await require_user(ctx)
    except UserNotFoundError as e:
        return Failed(MainMenu(), e)

    api = await ctx.api()
    try:
        await ctx.loader("withdraw in progress").interact(
            api.transfer_from_wallet(screen.wallet.id, user.address, to_wei(amount))
        )
    except AppError as e:
        return Failed(MainMenu(), e)

    return Next(MainMenu())


async def deposit(screen: Deposit, ctx: AppContext) -> Transition:
    """Fund a custody wallet from the fee payer"""
    amount = await ctx.prompter.ask_decimal(f"Enter the {settings.native_symbol} amount")
    if amount is None:
        return Next(WalletMenu())

    api = await ctx.api()
    try:
        await ctx.loader("deposit in progress").interact(
            api.transfer_from_funding(screen.wallet.address, to_wei(amount))
        )
    except AppError as e:
        return Failed(MainMenu(), e)

    return Next(MainMenu())


async def send(screen: Send, ctx: AppContext) -> Transition:
    raw_receiver = await ctx.prompter.ask_text("Enter the receiver address")
    if raw_receiver is None:
        return Next(WalletMenu())
    try:
        receiver = parse_address(raw_receiver)
    except AppError as e:
        return Failed(WalletMenu(), e)

    amount = await ctx.prompter.ask_decimal(f"Enter the {settings.native_symbol} amount")
    if amount is None:
        return Next(WalletMenu())

    api = await ctx.api()
    try:
        await ctx.loader("send in progress").interact(
            api.transfer_from_wallet(screen.wallet.id, receiver, to_wei(amount))
        )
    except AppError as e:
        return Failed(MainMenu(), e)

    return Next(MainMenu())
