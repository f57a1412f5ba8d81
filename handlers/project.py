"""Project menu, selection, creation and deletion"""

import logging

from errors import AppError, ProjectNotFoundError
from handlers.common import AppContext, require_active_project
from prompts import CreateProjectOption, ProjectMenuOption, choose
from states import (
    AutomationMenu,
    Buy,
    CreateProject,
    DeleteProject,
    Failed,
    MainMenu,
    Next,
    ProjectMenu,
    SelectProject,
    Sell,
    Transition,
)
from utils import parse_address

logger = logging.getLogger(__name__)

PROJECT_MENU_SCREENS = {
    ProjectMenuOption.BUY: lambda: Buy(auto=False),
    ProjectMenuOption.SELL: lambda: Sell(auto=False),
    ProjectMenuOption.AUTO_BUY: lambda: Buy(auto=True),
    ProjectMenuOption.AUTO_SELL: lambda: Sell(auto=True),
    ProjectMenuOption.AUTOMATION: AutomationMenu,
    ProjectMenuOption.DELETE: DeleteProject,
    ProjectMenuOption.BACK: MainMenu,
}


async def project_menu(screen: ProjectMenu, ctx: AppContext) -> Transition:
    option = await choose(ctx.prompter, "Project menu", ProjectMenuOption)
    return Next(PROJECT_MENU_SCREENS[option]())


async def select_project(screen: SelectProject, ctx: AppContext) -> Transition:
    projects = await ctx.store.projects.get()
    project_ids = list(projects)
    labels = [projects[project_id].name for project_id in project_ids]
    labels.append("Back")

    index = await ctx.prompter.select("Select Project", labels)
    if index == len(labels) - 1:
        return Next(MainMenu())

    await ctx.store.set_active_project(project_ids[index])
    return Next(ProjectMenu())


async def create_project(screen: CreateProject, ctx: AppContext) -> Transition:
    """Import a deployed token, or register a project by name and deployer"""
    option = await choose(ctx.prompter, "Import token", CreateProjectOption)
    if option is CreateProjectOption.BACK:
        return Next(MainMenu())

    api = await ctx.api()
    try:
        if option is CreateProjectOption.IMPORT:
            raw_address = await ctx.prompter.ask_text("Enter contract address")
            if raw_address is None:
                return Next(MainMenu())
            operation = api.create_project(parse_address(raw_address))
        else:
            name = await ctx.prompter.ask_text("Enter project name")
            if name is None:
                return Next(MainMenu())
            raw_deployer = await ctx.prompter.ask_text("Enter the deployer address")
            if raw_deployer is None:
                return Next(MainMenu())
            operation = api.create_named_project(name, parse_address(raw_deployer))

        project = await ctx.loader("import_token in progress").interact(operation)
    except AppError as e:
        return Failed(MainMenu(), e)

    await ctx.store.put_project(project)
    await ctx.store.set_active_project(project.id)
    logger.info(f"Created project {project.id} ({project.name})")
    return Next(ProjectMenu())


async def delete_project(screen: DeleteProject, ctx: AppContext) -> Transition:
    try:
        project = await require_active_project(ctx)
    except ProjectNotFoundError as e:
        return Failed(MainMenu(), e)

    delete = await ctx.prompter.confirm("Are you sure you want to delete this project?", default=False)
    if not delete:
        return Next(ProjectMenu())

    api = await ctx.api()
    try:
        await ctx.loader("delete_project in progress").interact(api.delete_project(project.id))
    except AppError as e:
        return Failed(MainMenu(), e)

    await ctx.store.remove_project(project.id)
    await ctx.store.set_active_project(None)
    logger.info(f"Deleted project {project.id}")
    return Next(MainMenu())
