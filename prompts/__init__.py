"""Prompts module exports"""

from .console import Prompter
from .menus import (
    AutomationMenuOption,
    CreateProjectOption,
    MainMenuOption,
    ProjectMenuOption,
    WalletMenuOption,
    choose,
)

__all__ = [
    'Prompter',
    'AutomationMenuOption',
    'CreateProjectOption',
    'MainMenuOption',
    'ProjectMenuOption',
    'WalletMenuOption',
    'choose',
]
