"""
Tests for the service binding
HTTP statuses and payload problems map onto the service error kinds
"""

import json

import httpx
import pytest
from eth_account import Account

from api_client import BackendAPI, PendingSnipe
from conftest import DEPLOYER, OPERATOR_KEY
from errors import (
    MalformedResponseError,
    NotFoundError,
    PendingSnipeError,
    ServerRejectedError,
    TransportError,
    UnauthorizedError,
    UnhandledServerError,
)
from models import AutomationState


def make_api(handler, jwt="jwt"):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    api = BackendAPI(client=client)
    api.jwt = jwt
    return api


def respond(status_code, payload=None):
    def handler(request):
        if payload is None:
            return httpx.Response(status_code)
        return httpx.Response(status_code, json=payload)
    return handler


class TestStatusMapping:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code,error", [
        (401, UnauthorizedError),
        (403, UnauthorizedError),
        (404, NotFoundError),
        (409, ServerRejectedError),
        (500, UnhandledServerError),
        (503, UnhandledServerError),
    ])
    async def test_error_statuses(self, status_code, error):
        api = make_api(respond(status_code, {"error": "nope"}))

        with pytest.raises(error):
            await api.list_projects()

    @pytest.mark.asyncio
    async def test_missing_token_fails_before_io(self):
        """Test: authenticated calls without a token never hit the network"""
        # Arrange
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json={"projects": []})

        api = make_api(handler, jwt=None)

        # Act / Assert
        with pytest.raises(UnauthorizedError):
            await api.list_projects()
        assert requests == []

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        api = make_api(lambda request: httpx.Response(200, content=b"<html>"))

        with pytest.raises(MalformedResponseError):
            await api.list_projects()

    @pytest.mark.asyncio
    async def test_missing_field(self):
        api = make_api(respond(200, {"items": []}))

        with pytest.raises(MalformedResponseError):
            await api.list_projects()

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        api = make_api(handler)

        with pytest.raises(TransportError):
            await api.list_projects()


class TestEndpoints:
    """Test request shapes and response parsing"""

    @pytest.mark.asyncio
    async def test_authenticate_signs_nonce(self):
        # Arrange
        signer = Account.from_key(OPERATOR_KEY)
        seen = []

        def handler(request):
            seen.append(request)
            if request.url.path == "/auth/nonce":
                return httpx.Response(200, json={"nonce": "abc"})
            return httpx.Response(200, json={"token": "jwt-token"})

        api = make_api(handler, jwt=None)

        # Act
        token = await api.authenticate(signer)

        # Assert
        assert token == "jwt-token"
        login_body = json.loads(seen[1].content)
        assert login_body["public_key"] == signer.address
        assert "authorization" not in seen[1].headers

    @pytest.mark.asyncio
    async def test_bearer_token_sent(self):
        # Arrange
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"public_key": "0xabc", "balance": "10", "wallets": [
                {"id": 1, "public_key": "0xdef", "balance": "5"},
            ]})

        api = make_api(handler)

        # Act
        user = await api.fetch_current_user()

        # Assert
        assert seen[0].headers["authorization"] == "Bearer jwt"
        assert user.wallets["0xdef"].balance_wei == 5

    @pytest.mark.asyncio
    async def test_automation_status_failed(self):
        api = make_api(respond(200, {"status": {"Failed": "insufficient funds"}}))

        status = await api.fetch_automation_status(1)

        assert status.state is AutomationState.FAILED
        assert status.label == "insufficient funds"

    @pytest.mark.asyncio
    async def test_empty_body(self):
        api = make_api(respond(204))

        assert await api.delete_project(1) is None

    @pytest.mark.asyncio
    async def test_balances_scoped_to_token(self):
        # Arrange
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={
                "user": {"balance": "1000"},
                "wallets": {"0xdef": {"balance": "7", "token_balance": "3"}},
            })

        api = make_api(handler)

        # Act
        balances = await api.fetch_balances("0xtoken")

        # Assert
        assert seen[0].url.params["token_address"] == "0xtoken"
        assert balances.user_balance_wei == 1000
        assert balances.wallets["0xdef"].token_balance == 3


class TestPendingSnipe:

    @pytest.mark.asyncio
    async def test_polls_until_complete(self):
        # Arrange
        statuses = [
            {"status": "pending"},
            {"status": "complete", "project": {"id": 4, "name": "moon", "deployer": DEPLOYER}},
        ]
        api = make_api(lambda request: httpx.Response(200, json=statuses.pop(0)))
        pending = PendingSnipe(api, DEPLOYER, "snipe-1", poll_interval=0)

        # Act
        project = await pending

        # Assert
        assert project.id == 4
        assert statuses == []

    @pytest.mark.asyncio
    async def test_failed_snipe(self):
        api = make_api(respond(200, {"status": "failed", "error": "deployer never launched"}))
        pending = PendingSnipe(api, DEPLOYER, "snipe-1", poll_interval=0)

        with pytest.raises(PendingSnipeError, match="never launched"):
            await pending

    @pytest.mark.asyncio
    async def test_create_snipe_returns_handle(self):
        api = make_api(respond(200, {"snipe_id": 9}))

        pending = await api.create_snipe(DEPLOYER, 3)

        assert pending.snipe_id == "9"
        assert pending.deployer == DEPLOYER
