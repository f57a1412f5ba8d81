"""Server-side automation loop for the active project"""

import logging
from decimal import Decimal

from config import settings
from errors import AppError, ProjectNotFoundError
from handlers.common import AppContext, require_active_project
from models import AutomationParams, AutomationStatus
from prompts import AutomationMenuOption, choose
from states import (
    AutomationMenu,
    Failed,
    MainMenu,
    Next,
    ProjectMenu,
    StartAutomation,
    StopAutomation,
    Transition,
)
from utils import to_wei

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 3
DEFAULT_AMOUNT = Decimal("0.015")

AUTOMATION_MENU_SCREENS = {
    AutomationMenuOption.START: StartAutomation,
    AutomationMenuOption.STOP: StopAutomation,
    AutomationMenuOption.BACK: ProjectMenu,
}


async def automation_menu(screen: AutomationMenu, ctx: AppContext) -> Transition:
    option = await choose(ctx.prompter, "Automation menu", AutomationMenuOption)
    return Next(AUTOMATION_MENU_SCREENS[option]())


async def start_automation(screen: StartAutomation, ctx: AppContext) -> Transition:
    try:
        project = await require_active_project(ctx)
    except ProjectNotFoundError as e:
        return Failed(MainMenu(), e)

    interval = await ctx.prompter.ask_int("Enter interval (seconds)", default=DEFAULT_INTERVAL_SECONDS)
    if interval is None:
        return Next(AutomationMenu())
    amount = await ctx.prompter.ask_decimal(
        f"Enter amount ({settings.native_symbol.lower()})", default=DEFAULT_AMOUNT
    )
    if amount is None:
        return Next(AutomationMenu())

    params = AutomationParams(interval_seconds=interval, amount_wei=to_wei(amount))
    api = await ctx.api()
    try:
        await ctx.loader("start_automation in progress").interact(api.enable_automation(project.id, params))
    except AppError as e:
        return Failed(AutomationMenu(), e)

    await ctx.store.mark_pending_automation(project.id)
    await ctx.store.set_automation_status(AutomationStatus.pending())
    logger.info(f"Started automation on project {project.id} every {interval}s")
    return Next(AutomationMenu())


async def stop_automation(screen: StopAutomation, ctx: AppContext) -> Transition:
    api = await ctx.api()
    try:
        await ctx.loader("stop_automation in progress").interact(api.disable_automation())
    except AppError as e:
        return Failed(AutomationMenu(), e)

    return Next(AutomationMenu())
