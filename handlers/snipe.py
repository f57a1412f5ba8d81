"""Snipe creation and cancellation"""

import logging

from errors import AppError, DomainValidationError, UnhandledError, UserNotFoundError, WalletCountExceededError
from handlers.common import AppContext, require_user
from loader import Cancelled, Completed
from states import CancelSnipe, CreateSnipe, Failed, MainMenu, Next, ProjectMenu, Transition
from utils import parse_address

logger = logging.getLogger(__name__)

DEFAULT_WALLET_COUNT = 5


async def create_snipe(screen: CreateSnipe, ctx: AppContext) -> Transition:
    """
    Queue a snipe on a deployer and wait for it, letting the operator
    stop waiting. Stopping hands over to CancelSnipe, which asks the server
    to drop the snipe.
    """
    try:
        user = await require_user(ctx)
    except UserNotFoundError as e:
        return Failed(MainMenu(), e)
    available = len(user.wallets)

    wallet_count = await ctx.prompter.ask_int("Enter wallet amount", default=DEFAULT_WALLET_COUNT)
    if wallet_count is None:
        return Next(MainMenu())
    if wallet_count <= 0:
        return Failed(MainMenu(), DomainValidationError("Wallet amount must be greater than 0"))
    if wallet_count > available:
        return Failed(MainMenu(), WalletCountExceededError(wallet_count, available))

    raw_deployer = await ctx.prompter.ask_text("Enter the deployer address")
    if raw_deployer is None:
        return Next(MainMenu())

    api = await ctx.api()
    try:
        deployer = parse_address(raw_deployer)
        pending_snipe = await ctx.loader("Creating snipe").interact(api.create_snipe(deployer, wallet_count))
    except AppError as e:
        return Failed(MainMenu(), e)

    try:
        outcome = await ctx.loader("Snipe pending").interact_with_cancel(pending_snipe)
    except AppError as e:
        # the watcher broke, the snipe may still be live
        return Failed(CancelSnipe(pending_snipe.deployer), e)

    if isinstance(outcome, Completed):
        project = outcome.value
        await ctx.store.put_project(project)
        await ctx.store.set_active_project(project.id)
        logger.info(f"Snipe on {deployer} finished as project {project.id}")
        return Next(ProjectMenu())

    if isinstance(outcome, Cancelled):
        logger.info(f"Stopped waiting for snipe on {deployer}")
        return Next(CancelSnipe(pending_snipe.deployer))

    error = outcome.error
    if not isinstance(error, AppError):
        error = UnhandledError(str(error))
    return Failed(MainMenu(), error)


async def cancel_snipe(screen: CancelSnipe, ctx: AppContext) -> Transition:
    api = await ctx.api()
    try:
        await ctx.loader("cancel_snipe in progress").interact(api.cancel_snipe(screen.deployer))
    except AppError as e:
        return Failed(MainMenu(), e)

    logger.info(f"Cancelled snipe on {screen.deployer}")
    return Next(MainMenu())
