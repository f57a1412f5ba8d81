"""
Background refresh of projects, balances and automation status.

Waits until the operator has logged in, then polls the service every
`settings.refresh_interval` seconds. The first failure stops the task and is
kept in `Refresher.error` for the driver to report; there is no retry.
"""

import asyncio
import logging
from typing import Optional

from config import settings
from errors import NotFoundError
from models import AutomationStatus, SessionStore

logger = logging.getLogger(__name__)


class Refresher:
    def __init__(self, store: SessionStore, interval: Optional[float] = None):
        self.store = store
        self.interval = settings.refresh_interval if interval is None else interval
        self.error: Optional[str] = None
        self._task: Optional[asyncio.Task] = None

    def start(self) -> None:
        self._task = asyncio.create_task(self.run())

    def done(self) -> bool:
        return self._task is not None and self._task.done()

    async def stop(self) -> None:
        if self._task is None or self._task.done():
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass

    async def run(self) -> None:
        await self.store.wait_for_auth()
        logger.info("Session authenticated, starting refresh loop")
        while True:
            try:
                await self.tick()
            except Exception as e:
                self.error = str(e) or e.__class__.__name__
                logger.error(f"Refresh loop stopped: {self.error}")
                return
            await asyncio.sleep(self.interval)

    async def tick(self) -> None:
        """One poll cycle, committed to the store in a single step"""
        api = await self.store.service.get()

        projects = await api.list_projects()
        active_id = await self.store.active_project.get()
        # the selection may point at a project this tick does not know yet
        active = projects.get(active_id) if active_id is not None else None

        balances = await api.fetch_balances(active.token_address if active else None)

        automation_status: Optional[AutomationStatus] = None
        if active is not None:
            try:
                automation_status = await api.fetch_automation_status(active.id)
            except NotFoundError:
                automation_status = None

        await self.store.apply_refresh(projects, balances, automation_status)
