"""
Tests for the screen handlers and the dispatch table
Store writes must only follow successful service calls
"""

import asyncio
from decimal import Decimal
from unittest.mock import patch

import pytest
from eth_account import Account

from api_client import PendingSnipe
from conftest import DEPLOYER, OPERATOR_KEY, make_project, make_user
from errors import (
    InvalidKeyError,
    NotFoundError,
    ProjectNotFoundError,
    ServerRejectedError,
    UnauthorizedError,
    UnhandledError,
    WalletCountExceededError,
)
from handlers import HANDLERS, dispatch, fallback_for
from handlers.auth import login, signup
from handlers.automation import start_automation
from handlers.main_menu import main_menu
from handlers.project import delete_project, select_project
from handlers.snipe import cancel_snipe, create_snipe
from handlers.trade import buy
from handlers.wallet import delete_wallet, withdraw
from loader import CancelWatcher
from models import AutomationState, Credentials
from states import (
    ALL_SCREENS,
    Buy,
    CancelSnipe,
    CreateSnipe,
    DeleteProject,
    DeleteWallet,
    Exit,
    Failed,
    Login,
    MainMenu,
    Next,
    ProjectMenu,
    SelectProject,
    Signup,
    StartAutomation,
    WalletMenu,
    Withdraw,
)


class FiringWatcher(CancelWatcher):
    """Watcher whose cancel key is already pressed"""

    def __init__(self):
        self.closed = False

    async def wait(self):
        return

    async def close(self):
        self.closed = True


class TestLogin:
    """Test login and the signup detour"""

    @pytest.mark.asyncio
    async def test_login_success(self, store, api, make_ctx):
        # Arrange
        user = make_user()
        api.authenticate.return_value = "jwt"
        api.fetch_current_user.return_value = user
        ctx = make_ctx(OPERATOR_KEY)

        # Act
        result = await login(Login(), ctx)

        # Assert
        assert result == Next(MainMenu())
        api.fetch_current_user.assert_awaited_once_with("jwt")
        assert await store.user.get() is user
        assert store.is_authenticated

    @pytest.mark.asyncio
    async def test_unknown_account_declined_signup(self, store, api, make_ctx):
        """Test: unknown key -> Signup -> decline -> Login, nothing stored"""
        # Arrange
        api.authenticate.side_effect = NotFoundError("no such user")
        ctx = make_ctx(OPERATOR_KEY, False)

        # Act
        first = await login(Login(), ctx)
        second = await signup(first.screen, ctx)

        # Assert
        assert isinstance(first.screen, Signup)
        assert first.screen.credentials.address == Account.from_key(OPERATOR_KEY).address
        assert second == Next(Login())
        api.register.assert_not_called()
        assert await store.user.get() is None
        assert not store.is_authenticated

    @pytest.mark.asyncio
    async def test_signup_creates_account(self, store, api, make_ctx):
        # Arrange
        credentials = Credentials(Account.from_key(OPERATOR_KEY))
        api.authenticate.return_value = "jwt"
        api.fetch_current_user.return_value = make_user()
        ctx = make_ctx(True)

        # Act
        result = await signup(Signup(credentials), ctx)

        # Assert
        assert result == Next(MainMenu())
        signer, new_signer = api.register.await_args.args
        assert signer is credentials.signer
        assert new_signer.address != credentials.address
        assert store.is_authenticated

    @pytest.mark.asyncio
    async def test_bad_key_stays_on_login(self, api, make_ctx):
        ctx = make_ctx("not a key")

        result = await login(Login(), ctx)

        assert isinstance(result, Failed)
        assert result.fallback == Login()
        assert isinstance(result.error, InvalidKeyError)
        api.authenticate.assert_not_called()

    @pytest.mark.asyncio
    async def test_blank_key_asks_again(self, make_ctx):
        result = await login(Login(), make_ctx(None))

        assert result == Next(Login())

    @pytest.mark.asyncio
    async def test_user_fetch_failure_stores_nothing(self, store, api, make_ctx):
        """Test: the token is only kept once the account loaded"""
        # Arrange
        api.authenticate.return_value = "jwt"
        api.fetch_current_user.side_effect = ServerRejectedError("bad request")
        ctx = make_ctx(OPERATOR_KEY)

        # Act
        result = await login(Login(), ctx)

        # Assert
        assert isinstance(result, Failed)
        assert not store.is_authenticated
        assert await store.user.get() is None


class TestMainMenu:

    @pytest.mark.asyncio
    async def test_active_project_is_cleared_first(self, store, make_ctx):
        """Test: returning to the main menu drops the selection and redraws"""
        # Arrange
        await store.put_project(make_project())
        await store.set_active_project(1)
        ctx = make_ctx()

        # Act
        result = await main_menu(MainMenu(), ctx)

        # Assert
        assert result == Next(MainMenu())
        assert await store.active_project.get() is None
        assert ctx.prompter.asked == []

    @pytest.mark.asyncio
    async def test_exit_is_offered(self, store, make_ctx):
        await store.set_user(make_user())

        result = await main_menu(MainMenu(), make_ctx("Exit"))

        assert result == Exit()

    @pytest.mark.asyncio
    async def test_option_routes_to_screen(self, make_ctx):
        result = await main_menu(MainMenu(), make_ctx("Tokens"))

        assert result == Next(SelectProject())


class TestProjects:

    @pytest.mark.asyncio
    async def test_select_project_sets_active(self, store, make_ctx):
        # Arrange
        await store.put_project(make_project(1, "alpha"))
        await store.put_project(make_project(2, "beta"))
        ctx = make_ctx("beta")

        # Act
        result = await select_project(SelectProject(), ctx)

        # Assert
        assert result == Next(ProjectMenu())
        assert await store.active_project.get() == 2

    @pytest.mark.asyncio
    async def test_delete_project_twice(self, store, api, make_ctx):
        """Test: the second delete finds no project and calls nothing"""
        # Arrange
        await store.put_project(make_project())
        await store.set_active_project(1)
        ctx = make_ctx(True)

        # Act
        first = await delete_project(DeleteProject(), ctx)
        second = await delete_project(DeleteProject(), ctx)

        # Assert
        assert first == Next(MainMenu())
        assert isinstance(second, Failed)
        assert isinstance(second.error, ProjectNotFoundError)
        api.delete_project.assert_awaited_once_with(1)
        assert await store.projects.get() == {}

    @pytest.mark.asyncio
    async def test_delete_failure_leaves_store(self, store, api, make_ctx):
        # Arrange
        project = make_project()
        await store.put_project(project)
        await store.set_active_project(1)
        api.delete_project.side_effect = ServerRejectedError("busy")

        # Act
        result = await delete_project(DeleteProject(), make_ctx(True))

        # Assert
        assert isinstance(result, Failed)
        assert result.fallback == MainMenu()
        assert await store.projects.get() == {1: project}
        assert await store.active_project.get() == 1


class TestSnipe:
    """Test snipe creation, waiting and cancellation"""

    @pytest.mark.asyncio
    async def test_more_wallets_than_owned_is_rejected(self, store, api, make_ctx):
        """Test: asking for 10 wallets with 5 owned never reaches the service"""
        # Arrange
        await store.set_user(make_user(wallet_count=5))
        ctx = make_ctx(10)

        # Act
        result = await create_snipe(CreateSnipe(), ctx)

        # Assert
        assert isinstance(result, Failed)
        assert isinstance(result.error, WalletCountExceededError)
        assert result.error.available == 5
        api.create_snipe.assert_not_called()

    @pytest.mark.asyncio
    async def test_snipe_completes(self, store, api, make_ctx):
        # Arrange
        await store.set_user(make_user())
        project = make_project(3)

        async def finished():
            return project

        api.create_snipe.return_value = finished()
        ctx = make_ctx(2, DEPLOYER)

        # Act
        with patch("loader.make_watcher", return_value=FiringWatcher()):
            result = await create_snipe(CreateSnipe(), ctx)

        # Assert
        assert result == Next(ProjectMenu())
        assert await store.get_active_project() is project

    @pytest.mark.asyncio
    async def test_cancel_then_cancel_snipe(self, store, api, make_ctx):
        """Test: stopping the wait leads to CancelSnipe, which asks the service to drop it"""
        # Arrange
        await store.set_user(make_user())
        api.get_snipe_status.return_value = {"status": "pending"}
        api.create_snipe.return_value = PendingSnipe(api, "0x" + "AB" * 20, "snipe-1", poll_interval=60)
        watcher = FiringWatcher()
        ctx = make_ctx(2, DEPLOYER)

        # Act
        with patch("loader.make_watcher", return_value=watcher):
            first = await create_snipe(CreateSnipe(), ctx)
        second = await cancel_snipe(first.screen, ctx)

        # Assert
        assert isinstance(first.screen, CancelSnipe)
        assert watcher.closed
        api.cancel_snipe.assert_awaited_once_with(first.screen.deployer)
        assert second == Next(MainMenu())
        assert await store.projects.get() == {}
        assert await store.active_project.get() is None

    @pytest.mark.asyncio
    async def test_snipe_failure_is_reported(self, store, api, make_ctx):
        # Arrange
        await store.set_user(make_user())

        async def failing():
            await asyncio.sleep(0)
            raise RuntimeError("socket closed")

        api.create_snipe.return_value = failing()
        ctx = make_ctx(1, DEPLOYER)

        class IdleWatcher(CancelWatcher):
            async def wait(self):
                await asyncio.Event().wait()

        # Act
        with patch("loader.make_watcher", return_value=IdleWatcher()):
            result = await create_snipe(CreateSnipe(), ctx)

        # Assert
        assert isinstance(result, Failed)
        assert result.fallback == MainMenu()
        assert isinstance(result.error, UnhandledError)


class TestTradeAndWallets:

    @pytest.mark.asyncio
    async def test_buy_needs_active_project(self, store, api, make_ctx):
        await store.set_user(make_user())

        result = await buy(Buy(auto=True), make_ctx())

        assert isinstance(result, Failed)
        assert isinstance(result.error, ProjectNotFoundError)
        api.auto_buy.assert_not_called()

    @pytest.mark.asyncio
    async def test_manual_buy(self, store, api, make_ctx):
        # Arrange
        user = make_user(wallet_count=2)
        await store.set_user(user)
        await store.put_project(make_project())
        await store.set_active_project(1)
        ctx = make_ctx(1, Decimal("0.5"))

        # Act
        result = await buy(Buy(), ctx)

        # Assert
        assert result == Next(ProjectMenu())
        api.buy.assert_awaited_once_with(1, 2, 5 * 10 ** 17)

    @pytest.mark.asyncio
    async def test_withdraw_goes_to_fee_payer(self, store, api, make_ctx):
        # Arrange
        user = make_user(wallet_count=1)
        wallet = next(iter(user.wallets.values()))
        await store.set_user(user)

        # Act
        result = await withdraw(Withdraw(wallet=wallet), make_ctx(Decimal("0.1")))

        # Assert
        assert result == Next(MainMenu())
        api.transfer_from_wallet.assert_awaited_once_with(wallet.id, user.address, 10 ** 17)

    @pytest.mark.asyncio
    async def test_delete_wallet_failure_keeps_wallet(self, store, api, make_ctx):
        # Arrange
        user = make_user(wallet_count=1)
        wallet = next(iter(user.wallets.values()))
        await store.set_user(user)
        api.delete_wallet.side_effect = ServerRejectedError("wallet has funds")

        # Act
        result = await delete_wallet(DeleteWallet(wallet=wallet), make_ctx(True))

        # Assert
        assert isinstance(result, Failed)
        assert result.fallback == WalletMenu()
        assert wallet.address in (await store.user.get()).wallets


class TestAutomation:

    @pytest.mark.asyncio
    async def test_start_marks_pending(self, store, api, make_ctx):
        # Arrange
        await store.put_project(make_project())
        await store.set_active_project(1)
        ctx = make_ctx(3, Decimal("0.015"))

        # Act
        await start_automation(StartAutomation(), ctx)

        # Assert
        project_id, params = api.enable_automation.await_args.args
        assert project_id == 1
        assert params.to_dict() == {"interval_secs": 3, "amount_wei": "15000000000000000"}
        assert (await store.projects.get())[1].pending_automation
        assert (await store.automation_status.get()).state is AutomationState.PENDING


class TestDispatch:
    """Test the dispatch table and error conversion"""

    def test_every_screen_has_a_handler(self):
        assert set(HANDLERS) == set(ALL_SCREENS)

    def test_fallbacks(self):
        assert fallback_for(Signup(Credentials(Account.from_key(OPERATOR_KEY)))) == Login()
        assert fallback_for(ProjectMenu()) == MainMenu()

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_failed(self, make_ctx):
        # Arrange
        ctx = make_ctx()

        async def broken(screen, ctx):
            raise KeyError("wallets")

        # Act
        with patch.dict(HANDLERS, {ProjectMenu: broken}):
            result = await dispatch(ProjectMenu(), ctx)

        # Assert
        assert isinstance(result, Failed)
        assert result.fallback == MainMenu()
        assert isinstance(result.error, UnhandledError)

    @pytest.mark.asyncio
    async def test_escaping_app_error_keeps_its_type(self, make_ctx):
        async def broken(screen, ctx):
            raise UnauthorizedError("Missing JWT")

        with patch.dict(HANDLERS, {ProjectMenu: broken}):
            result = await dispatch(ProjectMenu(), make_ctx())

        assert isinstance(result.error, UnauthorizedError)

    @pytest.mark.asyncio
    async def test_only_main_menu_exits(self, store, make_ctx):
        """Test: Exit is never returned by a screen other than the main menu"""
        await store.set_user(make_user())

        result = await dispatch(WalletMenu(), make_ctx("Back"))

        assert result == Next(MainMenu())
