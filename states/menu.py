"""
Menu screens and the results a screen handler can return.

Screens form a closed set: each one is a small frozen dataclass carrying
only the context it needs. `ALL_SCREENS` lists every kind so dispatch and
tests can check the set is covered.
"""

from dataclasses import dataclass
from typing import Tuple, Type, Union

from errors import AppError
from models.entities import Credentials, Wallet


@dataclass(frozen=True)
class Screen:
    """Base class for menu states"""


@dataclass(frozen=True)
class Login(Screen):
    pass


@dataclass(frozen=True)
class Signup(Screen):
    credentials: Credentials


@dataclass(frozen=True)
class MainMenu(Screen):
    pass


@dataclass(frozen=True)
class Export(Screen):
    pass


@dataclass(frozen=True)
class ProjectMenu(Screen):
    pass


@dataclass(frozen=True)
class CreateProject(Screen):
    pass


@dataclass(frozen=True)
class SelectProject(Screen):
    pass


@dataclass(frozen=True)
class DeleteProject(Screen):
    pass


@dataclass(frozen=True)
class CreateSnipe(Screen):
    pass


@dataclass(frozen=True)
class CancelSnipe(Screen):
    deployer: str


@dataclass(frozen=True)
class Buy(Screen):
    auto: bool = False


@dataclass(frozen=True)
class Sell(Screen):
    auto: bool = False


@dataclass(frozen=True)
class WalletMenu(Screen):
    pass


@dataclass(frozen=True)
class Withdraw(Screen):
    wallet: Wallet


@dataclass(frozen=True)
class Deposit(Screen):
    wallet: Wallet


@dataclass(frozen=True)
class Send(Screen):
    wallet: Wallet


@dataclass(frozen=True)
class ImportWallet(Screen):
    pass


@dataclass(frozen=True)
class DeleteWallet(Screen):
    wallet: Wallet


@dataclass(frozen=True)
class RecoverFunds(Screen):
    pass


@dataclass(frozen=True)
class AutomationMenu(Screen):
    pass


@dataclass(frozen=True)
class StartAutomation(Screen):
    pass


@dataclass(frozen=True)
class StopAutomation(Screen):
    pass


ALL_SCREENS: Tuple[Type[Screen], ...] = (
    Login,
    Signup,
    MainMenu,
    Export,
    ProjectMenu,
    CreateProject,
    SelectProject,
    DeleteProject,
    CreateSnipe,
    CancelSnipe,
    Buy,
    Sell,
    WalletMenu,
    Withdraw,
    Deposit,
    Send,
    ImportWallet,
    DeleteWallet,
    RecoverFunds,
    AutomationMenu,
    StartAutomation,
    StopAutomation,
)


@dataclass(frozen=True)
class Next:
    screen: Screen


@dataclass(frozen=True)
class Exit:
    pass


@dataclass(frozen=True)
class Failed:
    """An error together with the screen to resume at"""
    fallback: Screen
    error: AppError


Transition = Union[Next, Exit, Failed]
