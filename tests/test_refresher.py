"""
Tests for the background refresh task
"""

import asyncio

import pytest

from conftest import make_project, make_user
from errors import NotFoundError, TransportError
from models import AutomationStatus, Balances, Deployment, WalletBalance
from refresher import Refresher


@pytest.fixture
def balances():
    return Balances(user_balance_wei=42, wallets={})


class TestRefresher:

    @pytest.mark.asyncio
    async def test_waits_for_login(self, store, api):
        """Test: nothing is fetched before a token is stored"""
        # Arrange
        refresher = Refresher(store, interval=0)

        # Act
        refresher.start()
        await asyncio.sleep(0.01)

        # Assert
        api.list_projects.assert_not_called()
        assert not refresher.done()
        await refresher.stop()

    @pytest.mark.asyncio
    async def test_tick_scopes_balances_to_active_project(self, store, api, balances):
        # Arrange
        project = make_project()
        project.deployment = Deployment(token_address="0xtoken")
        api.list_projects.return_value = {1: project}
        api.fetch_balances.return_value = balances
        api.fetch_automation_status.return_value = AutomationStatus.running()
        await store.set_user(make_user(wallet_count=0))
        await store.set_active_project(1)

        # Act
        await Refresher(store).tick()

        # Assert
        api.fetch_balances.assert_awaited_once_with("0xtoken")
        api.fetch_automation_status.assert_awaited_once_with(1)
        snapshot = await store.snapshot()
        assert snapshot.user.balance_wei == 42
        assert snapshot.automation_status.is_active

    @pytest.mark.asyncio
    async def test_not_started_automation(self, store, api, balances):
        """Test: NotFound from the automation endpoint means "not started" """
        # Arrange
        api.list_projects.return_value = {1: make_project()}
        api.fetch_balances.return_value = balances
        api.fetch_automation_status.side_effect = NotFoundError("no automation")
        await store.set_active_project(1)
        await store.set_automation_status(AutomationStatus.pending())

        # Act
        await Refresher(store).tick()

        # Assert
        assert await store.automation_status.get() is None

    @pytest.mark.asyncio
    async def test_no_active_project_skips_automation(self, store, api, balances):
        api.list_projects.return_value = {}
        api.fetch_balances.return_value = balances

        await Refresher(store).tick()

        api.fetch_balances.assert_awaited_once_with(None)
        api.fetch_automation_status.assert_not_called()

    @pytest.mark.asyncio
    async def test_stops_on_first_failure(self, store, api, balances):
        """Test: a failed fetch ends the task and keeps the reason"""
        # Arrange
        api.list_projects.side_effect = [{}, TransportError("connection reset")]
        api.fetch_balances.return_value = balances
        refresher = Refresher(store, interval=0)
        await store.set_token("jwt")

        # Act
        refresher.start()
        await asyncio.wait_for(refresher._task, timeout=1)

        # Assert
        assert refresher.done()
        assert refresher.error == "connection reset"
        assert api.list_projects.await_count == 2

    @pytest.mark.asyncio
    async def test_failed_tick_leaves_store(self, store, api):
        # Arrange
        user = make_user(wallet_count=1)
        await store.set_user(user)
        api.list_projects.return_value = {1: make_project()}
        api.fetch_balances.side_effect = TransportError("timeout")
        refresher = Refresher(store, interval=0)
        await store.set_token("jwt")

        # Act
        refresher.start()
        await asyncio.wait_for(refresher._task, timeout=1)

        # Assert
        assert await store.projects.get() == {}
        assert await store.user.get() is user
