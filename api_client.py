import asyncio
import logging
from typing import Any, Callable, Dict, Optional, TypeVar

import httpx
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount

from config import settings
from errors import (
    MalformedResponseError,
    NotFoundError,
    PendingSnipeError,
    ServerRejectedError,
    TransportError,
    UnauthorizedError,
    UnhandledServerError,
)
from models.entities import (
    AutomationParams,
    AutomationStatus,
    Balances,
    Project,
    User,
    Wallet,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _parse(builder: Callable[[Any], T], data: Any) -> T:
    try:
        return builder(data)
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedResponseError(f"Unexpected response payload: {e!r}") from e


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    detail = response.text or response.reason_phrase
    if response.status_code in (401, 403):
        raise UnauthorizedError(detail)
    if response.status_code == 404:
        raise NotFoundError(detail)
    if response.status_code >= 500:
        raise UnhandledServerError(detail)
    raise ServerRejectedError(detail)


class PendingSnipe:
    """
    Handle to a snipe the server is waiting to execute.

    Awaiting it polls the snipe status until the server reports the
    resulting project or gives up. Stopping the wait does not cancel the
    snipe server-side, use `BackendAPI.cancel_snipe` for that.
    """

    def __init__(self, api: "BackendAPI", deployer: str, snipe_id: str, poll_interval: float):
        self._api = api
        self.deployer = deployer
        self.snipe_id = snipe_id
        self._poll_interval = poll_interval

    async def wait(self) -> Project:
        while True:
            data = await self._api.get_snipe_status(self.deployer, self.snipe_id)
            status = _parse(lambda d: d["status"], data)
            if status == "complete":
                return _parse(lambda d: Project.from_dict(d["project"]), data)
            if status == "failed":
                raise PendingSnipeError(data.get("error") or "Snipe failed")
            await asyncio.sleep(self._poll_interval)

    def __await__(self):
        return self.wait().__await__()


class BackendAPI:
    """Client for interacting with the trading backend API"""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.base_url = settings.api_base_url
        self.jwt: Optional[str] = None
        self.client = client or httpx.AsyncClient(
            timeout=settings.request_timeout,
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10)
        )

    async def close(self):
        await self.client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        auth: bool = True,
        token: Optional[str] = None,
        **kwargs
    ) -> Any:
        url = f"{self.base_url}{path}"
        headers = {}
        if auth:
            token = token or self.jwt
            if not token:
                raise UnauthorizedError("Missing JWT")
            headers["Authorization"] = f"Bearer {token}"

        logger.info(f"{method} {url}")
        try:
            response = await self.client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise TransportError(str(e) or e.__class__.__name__) from e

        _raise_for_status(response)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Response is not JSON: {e}") from e

    # Auth endpoints
    async def _signed_payload(self, signer: LocalAccount) -> Dict[str, Any]:
        data = await self._request("POST", "/auth/nonce", auth=False, json={"public_key": signer.address})
        nonce = _parse(lambda d: str(d["nonce"]), data)
        signed = signer.sign_message(encode_defunct(text=nonce))
        return {"public_key": signer.address, "signature": signed.signature.hex()}

    async def authenticate(self, signer: LocalAccount) -> str:
        """Sign a login nonce and return the session token. NotFoundError if no account exists."""
        payload = await self._signed_payload(signer)
        data = await self._request("POST", "/auth/login", auth=False, json=payload)
        return _parse(lambda d: str(d["token"]), data)

    async def register(self, signer: LocalAccount, new_signer: LocalAccount) -> None:
        """Create an account for `signer` with `new_signer` as its fee payer"""
        payload = await self._signed_payload(signer)
        payload["fee_payer_private_key"] = new_signer.key.hex()
        await self._request("POST", "/user", auth=False, json=payload)

    # User endpoints
    async def fetch_current_user(self, token: Optional[str] = None) -> User:
        """Load the account, optionally with a token that is not stored yet"""
        data = await self._request("GET", "/user", token=token)
        return _parse(User.from_dict, data)

    async def fetch_balances(self, token_address: Optional[str] = None) -> Balances:
        """Fee payer and custody wallet balances, token balances scoped to `token_address`"""
        params = {"token_address": token_address} if token_address else None
        data = await self._request("GET", "/user/balances", params=params)
        return _parse(Balances.from_dict, data)

    async def export_account(self) -> Dict[str, Any]:
        data = await self._request("GET", "/user/export")
        return _parse(dict, data)

    # Project endpoints
    async def list_projects(self) -> Dict[int, Project]:
        data = await self._request("GET", "/projects")
        projects = _parse(lambda d: [Project.from_dict(item) for item in d["projects"]], data)
        return {project.id: project for project in projects}

    async def create_project(self, token_address: str) -> Project:
        """Import an already deployed token as a project"""
        data = await self._request("POST", "/projects", json={"token_address": token_address})
        return _parse(Project.from_dict, data)

    async def create_named_project(self, name: str, deployer: str) -> Project:
        data = await self._request("POST", "/projects", json={"name": name, "deployer": deployer})
        return _parse(Project.from_dict, data)

    async def delete_project(self, project_id: int) -> None:
        await self._request("DELETE", f"/projects/{project_id}")

    # Snipe endpoints
    async def create_snipe(self, deployer: str, wallet_count: int) -> PendingSnipe:
        payload = {"deployer": deployer, "wallet_count": wallet_count}
        data = await self._request("POST", "/snipes", json=payload)
        snipe_id = _parse(lambda d: str(d["snipe_id"]), data)
        return PendingSnipe(self, deployer, snipe_id, settings.snipe_poll_interval)

    async def get_snipe_status(self, deployer: str, snipe_id: str) -> Dict[str, Any]:
        data = await self._request("GET", f"/snipes/{deployer}/{snipe_id}")
        return _parse(dict, data)

    async def cancel_snipe(self, deployer: str) -> None:
        await self._request("DELETE", f"/snipes/{deployer}")

    # Trade endpoints
    async def buy(self, project_id: int, wallet_id: int, amount_wei: int) -> None:
        payload = {"wallet_id": wallet_id, "amount_wei": str(amount_wei)}
        await self._request("POST", f"/projects/{project_id}/buy", json=payload)

    async def sell(self, project_id: int, wallet_id: int) -> None:
        await self._request("POST", f"/projects/{project_id}/sell", json={"wallet_id": wallet_id})

    async def auto_buy(self, project_id: int, amount_wei: int) -> None:
        payload = {"amount_wei": str(amount_wei)}
        await self._request("POST", f"/projects/{project_id}/auto-buy", json=payload)

    async def auto_sell(self, project_id: int) -> None:
        await self._request("POST", f"/projects/{project_id}/auto-sell")

    # Wallet endpoints
    async def transfer_from_wallet(self, wallet_id: int, receiver: str, amount_wei: int) -> None:
        """Move funds out of a custody wallet"""
        payload = {"receiver": receiver, "amount_wei": str(amount_wei)}
        await self._request("POST", f"/wallets/{wallet_id}/transfer", json=payload)

    async def transfer_from_funding(self, receiver: str, amount_wei: int) -> None:
        """Move funds out of the fee payer"""
        payload = {"receiver": receiver, "amount_wei": str(amount_wei)}
        await self._request("POST", "/user/transfer", json=payload)

    async def recover_funds(self) -> None:
        """Sweep every custody wallet back into the fee payer"""
        await self._request("POST", "/wallets/recover")

    async def import_wallet(self, signer: LocalAccount) -> Wallet:
        data = await self._request("POST", "/wallets", json={"private_key": signer.key.hex()})
        return _parse(Wallet.from_dict, data)

    async def delete_wallet(self, wallet_id: int) -> None:
        await self._request("DELETE", f"/wallets/{wallet_id}")

    # Automation endpoints
    async def enable_automation(self, project_id: int, params: AutomationParams) -> None:
        await self._request("POST", f"/projects/{project_id}/automation", json=params.to_dict())

    async def disable_automation(self) -> None:
        await self._request("DELETE", "/automation")

    async def fetch_automation_status(self, project_id: int) -> AutomationStatus:
        """Raises NotFoundError when automation was never started for the project"""
        data = await self._request("GET", f"/projects/{project_id}/automation")
        return _parse(AutomationStatus.from_dict, data)
