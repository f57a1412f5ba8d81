"""States module exports"""

from .menu import (
    ALL_SCREENS,
    AutomationMenu,
    Buy,
    CancelSnipe,
    CreateProject,
    CreateSnipe,
    DeleteProject,
    DeleteWallet,
    Deposit,
    Exit,
    Export,
    Failed,
    ImportWallet,
    Login,
    MainMenu,
    Next,
    ProjectMenu,
    RecoverFunds,
    Screen,
    SelectProject,
    Sell,
    Send,
    Signup,
    StartAutomation,
    StopAutomation,
    Transition,
    WalletMenu,
    Withdraw,
)

__all__ = [
    'ALL_SCREENS',
    'AutomationMenu',
    'Buy',
    'CancelSnipe',
    'CreateProject',
    'CreateSnipe',
    'DeleteProject',
    'DeleteWallet',
    'Deposit',
    'Exit',
    'Export',
    'Failed',
    'ImportWallet',
    'Login',
    'MainMenu',
    'Next',
    'ProjectMenu',
    'RecoverFunds',
    'Screen',
    'SelectProject',
    'Sell',
    'Send',
    'Signup',
    'StartAutomation',
    'StopAutomation',
    'Transition',
    'WalletMenu',
    'Withdraw',
]
