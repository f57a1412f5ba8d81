"""Manual and automatic buy / sell on the active project"""

from config import settings
from errors import AppError, ProjectNotFoundError
from handlers.common import AppContext, require_active_project, select_wallet
from states import Buy, Failed, MainMenu, Next, ProjectMenu, Sell, Transition
from utils import to_wei


async def buy(screen: Buy, ctx: AppContext) -> Transition:
    wallet = None
    if not screen.auto:
        wallet = await select_wallet(ctx)
        if wallet is None:
            return Next(ProjectMenu())

    try:
        project = await require_active_project(ctx)
    except ProjectNotFoundError as e:
        return Failed(MainMenu(), e)

    amount = await ctx.prompter.ask_decimal(f"Enter the {settings.native_symbol} amount to buy")
    if amount is None:
        return Next(ProjectMenu())

    api = await ctx.api()
    try:
        if screen.auto:
            await ctx.loader("auto_buy in progress").interact(api.auto_buy(project.id, to_wei(amount)))
        else:
            await ctx.loader("buy in progress").interact(api.buy(project.id, wallet.id, to_wei(amount)))
    except AppError as e:
        return Failed(ProjectMenu(), e)

    return Next(ProjectMenu())


async def sell(screen: Sell, ctx: AppContext) -> Transition:
    wallet = None
    if not screen.auto:
        wallet = await select_wallet(ctx)
        if wallet is None:
            return Next(ProjectMenu())

    try:
        project = await require_active_project(ctx)
    except ProjectNotFoundError as e:
        return Failed(MainMenu(), e)

    api = await ctx.api()
    try:
        if screen.auto:
            await ctx.loader("auto_sell in progress").interact(api.auto_sell(project.id))
        else:
            await ctx.loader("sell in progress").interact(api.sell(project.id, wallet.id))
    except AppError as e:
        return Failed(ProjectMenu(), e)

    return Next(ProjectMenu())
