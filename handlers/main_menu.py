"""Main menu and account export"""

from errors import AppError
from handlers.common import AppContext
from prompts import MainMenuOption, choose
from states import (
    CreateProject,
    CreateSnipe,
    Exit,
    Export,
    Failed,
    ImportWallet,
    MainMenu,
    Next,
    RecoverFunds,
    SelectProject,
    Transition,
    WalletMenu,
)

MAIN_MENU_SCREENS = {
    MainMenuOption.SNIPE: CreateSnipe,
    MainMenuOption.IMPORT_TOKEN: CreateProject,
    MainMenuOption.TOKENS: SelectProject,
    MainMenuOption.WALLETS: WalletMenu,
    MainMenuOption.IMPORT_WALLET: ImportWallet,
    MainMenuOption.RECOVER_FUNDS: RecoverFunds,
    MainMenuOption.EXPORT: Export,
}


async def main_menu(screen: MainMenu, ctx: AppContext) -> Transition:
    # Coming back from project work: drop the selection and redraw first
    if await ctx.store.active_project.get() is not None:
        await ctx.store.set_active_project(None)
        return Next(MainMenu())

    # token balances only mean something for a selected project
    await ctx.store.clear_token_balances()

    option = await choose(ctx.prompter, "Main menu", MainMenuOption)
    if option is MainMenuOption.EXIT:
        return Exit()
    return Next(MAIN_MENU_SCREENS[option]())


async def export(screen: Export, ctx: AppContext) -> Transition:
    api = await ctx.api()
    try:
        data = await ctx.loader("export in progress").interact(api.export_account())
    except AppError as e:
        return Failed(MainMenu(), e)

    ctx.prompter.print_json(data)
    await ctx.prompter.acknowledge()
    return Next(MainMenu())
