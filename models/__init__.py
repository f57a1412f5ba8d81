"""Models module exports"""

from .entities import (
    AutomationParams,
    AutomationState,
    AutomationStatus,
    Balances,
    Credentials,
    Deployment,
    Project,
    User,
    Wallet,
    WalletBalance,
)
from .session import Guarded, RWLock, SessionStore, StoreSnapshot

__all__ = [
    'AutomationParams',
    'AutomationState',
    'AutomationStatus',
    'Balances',
    'Credentials',
    'Deployment',
    'Project',
    'User',
    'Wallet',
    'WalletBalance',
    'Guarded',
    'RWLock',
    'SessionStore',
    'StoreSnapshot',
]
