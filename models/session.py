"""Session store shared by the prompt loop, the screens and the refresh task"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, AsyncIterator, Dict, Generic, Optional, TypeVar

from models.entities import AutomationStatus, Balances, Project, User, Wallet

if TYPE_CHECKING:
    from api_client import BackendAPI

T = TypeVar("T")


class RWLock:
    """Many readers or one writer; waiting writers block new readers"""

    def __init__(self):
        self._cond = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        async with self._cond:
            await self._cond.wait_for(lambda: not self._writer and self._waiting_writers == 0)
            self._readers += 1
        try:
            yield
        finally:
            async with self._cond:
                self._readers -= 1
                self._cond.notify_all()

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        async with self._cond:
            self._waiting_writers += 1
            try:
                await self._cond.wait_for(lambda: not self._writer and self._readers == 0)
            finally:
                self._waiting_writers -= 1
                # a cancelled writer must release readers queued behind it
                self._cond.notify_all()
            self._writer = True
        try:
            yield
        finally:
            async with self._cond:
                self._writer = False
                self._cond.notify_all()

    @property
    def readers(self) -> int:
        return self._readers

    @property
    def locked_for_write(self) -> bool:
        return self._writer


@dataclass
class Slot(Generic[T]):
    value: T


class Guarded(Generic[T]):
    """A single store field behind its own read/write lock"""

    def __init__(self, value: T):
        self._value = value
        self.lock = RWLock()

    @asynccontextmanager
    async def read(self) -> AsyncIterator[T]:
        async with self.lock.read():
            yield self._value

    @asynccontextmanager
    async def write(self) -> AsyncIterator[Slot[T]]:
        async with self.lock.write():
            slot = Slot(self._value)
            yield slot
            self._value = slot.value

    async def get(self) -> T:
        async with self.read() as value:
            return value

    async def set(self, value: T) -> None:
        async with self.write() as slot:
            slot.value = value


@dataclass(frozen=True)
class StoreSnapshot:
    """Consistent view over user, projects, selection and automation status"""
    user: Optional[User]
    projects: Dict[int, Project] = field(default_factory=dict)
    active_project_id: Optional[int] = None
    automation_status: Optional[AutomationStatus] = None

    @property
    def active_project(self) -> Optional[Project]:
        # selection and projects are written independently, a dangling id reads as "no project yet"
        if self.active_project_id is None:
            return None
        return self.projects.get(self.active_project_id)


class SessionStore:
    """
    In-memory session state.

    Every field is guarded separately. Values are replaced, never mutated in
    place, so a reference obtained under a read lock stays a consistent
    snapshot after the lock is released. Multi-field operations take their
    locks in the order projects -> user -> active project -> automation status.
    """

    def __init__(self, api: "BackendAPI"):
        self.service: Guarded["BackendAPI"] = Guarded(api)
        self.projects: Guarded[Dict[int, Project]] = Guarded({})
        self.user: Guarded[Optional[User]] = Guarded(None)
        self.active_project: Guarded[Optional[int]] = Guarded(None)
        self.automation_status: Guarded[Optional[AutomationStatus]] = Guarded(None)
        self._authenticated = asyncio.Event()

    # Service handle

    async def set_token(self, token: str) -> None:
        async with self.service.write() as slot:
            slot.value.jwt = token
        self._authenticated.set()

    async def wait_for_auth(self) -> None:
        """Block until a token has been stored"""
        await self._authenticated.wait()

    @property
    def is_authenticated(self) -> bool:
        return self._authenticated.is_set()

    # User and wallets

    async def set_user(self, user: Optional[User]) -> None:
        await self.user.set(user)

    async def add_wallet(self, wallet: Wallet) -> None:
        async with self.user.write() as slot:
            if slot.value is not None:
                wallets = dict(slot.value.wallets)
                wallets[wallet.address] = wallet
                slot.value = replace(slot.value, wallets=wallets)

    async def remove_wallet(self, address: str) -> None:
        async with self.user.write() as slot:
            if slot.value is not None and address in slot.value.wallets:
                wallets = dict(slot.value.wallets)
                del wallets[address]
                slot.value = replace(slot.value, wallets=wallets)

    async def clear_token_balances(self) -> None:
        async with self.user.write() as slot:
            if slot.value is not None:
                wallets = {
                    address: replace(wallet, token_balance=None)
                    for address, wallet in slot.value.wallets.items()
                }
                slot.value = replace(slot.value, wallets=wallets)

    # Projects and selection

    async def put_project(self, project: Project) -> None:
        async with self.projects.write() as slot:
            projects = dict(slot.value)
            projects[project.id] = project
            slot.value = projects

    async def remove_project(self, project_id: int) -> None:
        async with self.projects.write() as slot:
            projects = dict(slot.value)
            projects.pop(project_id, None)
            slot.value = projects

    async def mark_pending_automation(self, project_id: int) -> None:
        async with self.projects.write() as slot:
            project = slot.value.get(project_id)
            if project is not None:
                projects = dict(slot.value)
                projects[project_id] = replace(project, pending_automation=True)
                slot.value = projects

    async def set_active_project(self, project_id: Optional[int]) -> None:
        await self.active_project.set(project_id)

    async def get_active_project(self) -> Optional[Project]:
        """Active project, or None if unset or not (yet) known"""
        async with self.projects.read() as projects:
            async with self.active_project.read() as project_id:
                if project_id is None:
                    return None
                return projects.get(project_id)

    async def set_automation_status(self, status: Optional[AutomationStatus]) -> None:
        await self.automation_status.set(status)

    # Whole-store operations

    async def snapshot(self) -> StoreSnapshot:
        async with self.projects.read() as projects:
            async with self.user.read() as user:
                async with self.active_project.read() as project_id:
                    async with self.automation_status.read() as status:
                        return StoreSnapshot(
                            user=user,
                            projects=projects,
                            active_project_id=project_id,
                            automation_status=status,
                        )

    async def apply_refresh(
        self,
        projects: Dict[int, Project],
        balances: Balances,
        automation_status: Optional[AutomationStatus],
    ) -> None:
        """Commit one refresh tick: projects first, then balances, then automation status"""
        async with self.projects.write() as projects_slot:
            async with self.user.write() as user_slot:
                async with self.active_project.read() as active_id:
                    async with self.automation_status.write() as status_slot:
                        inactive = automation_status is None or not automation_status.is_active
                        previous = projects_slot.value
                        refreshed: Dict[int, Project] = {}
                        for project_id, project in projects.items():
                            pending = project_id in previous and previous[project_id].pending_automation
                            if project_id == active_id and inactive:
                                pending = False
                            refreshed[project_id] = replace(project, pending_automation=pending)
                        projects_slot.value = refreshed

                        user = user_slot.value
                        if user is not None:
                            wallets = {}
                            for address, wallet in user.wallets.items():
                                balance = balances.wallets.get(address)
                                if balance is not None:
                                    wallet = replace(
                                        wallet,
                                        balance_wei=balance.balance_wei,
                                        token_balance=balance.token_balance,
                                    )
                                wallets[address] = wallet
                            user_slot.value = replace(
                                user, balance_wei=balances.user_balance_wei, wallets=wallets
                            )

                        status_slot.value = automation_status
