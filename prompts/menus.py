"""Menu option lists, in the order they are shown"""

from enum import Enum
from typing import Type, TypeVar

from prompts.console import Prompter

E = TypeVar("E", bound=Enum)


class MainMenuOption(str, Enum):
    SNIPE = "Snipe"
    IMPORT_TOKEN = "ImportToken"
    TOKENS = "Tokens"
    WALLETS = "Wallets"
    IMPORT_WALLET = "ImportWallet"
    RECOVER_FUNDS = "RecoverFunds"
    EXPORT = "Export"
    EXIT = "Exit"


class ProjectMenuOption(str, Enum):
    BUY = "Buy"
    SELL = "Sell"
    AUTO_BUY = "AutoBuy"
    AUTO_SELL = "AutoSell"
    AUTOMATION = "Automation"
    DELETE = "Delete"
    BACK = "Back"


class WalletMenuOption(str, Enum):
    WITHDRAW = "Withdraw"
    DEPOSIT = "Deposit"
    SEND = "Send"
    DELETE = "Delete"
    BACK = "Back"


class AutomationMenuOption(str, Enum):
    START = "StartAutomation"
    STOP = "StopAutomation"
    BACK = "Back"


class CreateProjectOption(str, Enum):
    IMPORT = "Import deployed token"
    NAMED = "New project (name + deployer)"
    BACK = "Back"


async def choose(prompter: Prompter, title: str, options: Type[E]) -> E:
    """Ask the operator to pick one member of an option enum"""
    members = list(options)
    index = await prompter.select(title, [member.value for member in members])
    return members[index]
