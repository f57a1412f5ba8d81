"""Account, project and automation models returned by the trading service"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from eth_account.signers.local import LocalAccount


def _amount(value: Any) -> int:
    # Backend sends wei amounts as decimal strings to stay clear of float precision
    return int(value)


def _optional_amount(value: Any) -> Optional[int]:
    return None if value is None else int(value)


@dataclass
class Wallet:
    """Custody wallet owned by the user"""
    id: int
    address: str
    balance_wei: int = 0
    token_balance: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Wallet":
        return cls(
            id=int(data["id"]),
            address=data["public_key"],
            balance_wei=_amount(data.get("balance", 0)),
            token_balance=_optional_amount(data.get("token_balance")),
        )


@dataclass
class User:
    address: str
    balance_wei: int = 0
    wallets: Dict[str, Wallet] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        wallets = [Wallet.from_dict(item) for item in data.get("wallets", [])]
        return cls(
            address=data["public_key"],
            balance_wei=_amount(data.get("balance", 0)),
            wallets={wallet.address: wallet for wallet in wallets},
        )

    @property
    def wallets_balance_wei(self) -> int:
        return sum(wallet.balance_wei for wallet in self.wallets.values())

    @property
    def wallets_token_balance(self) -> int:
        return sum(wallet.token_balance or 0 for wallet in self.wallets.values())


@dataclass(frozen=True)
class Deployment:
    """On-chain token a project trades"""
    token_address: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Deployment":
        return cls(token_address=data["token_address"])


@dataclass
class Project:
    id: int
    name: str
    deployer: str
    deployment: Optional[Deployment] = None
    pending_automation: bool = False  # client-side only, cleared once automation is seen inactive

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        deployment = data.get("deployment")
        return cls(
            id=int(data["id"]),
            name=data["name"],
            deployer=data["deployer"],
            deployment=Deployment.from_dict(deployment) if deployment else None,
        )

    @property
    def token_address(self) -> Optional[str]:
        return self.deployment.token_address if self.deployment else None


@dataclass(frozen=True)
class WalletBalance:
    balance_wei: int
    token_balance: Optional[int] = None


@dataclass(frozen=True)
class Balances:
    """One balance snapshot: fee payer plus every custody wallet"""
    user_balance_wei: int
    wallets: Dict[str, WalletBalance]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Balances":
        return cls(
            user_balance_wei=_amount(data["user"]["balance"]),
            wallets={
                address: WalletBalance(
                    balance_wei=_amount(item.get("balance", 0)),
                    token_balance=_optional_amount(item.get("token_balance")),
                )
                for address, item in data.get("wallets", {}).items()
            },
        )


class AutomationState(str, Enum):
    PENDING = "Pending"
    RUNNING = "Running"
    FAILED = "Failed"


@dataclass(frozen=True)
class AutomationStatus:
    state: AutomationState
    reason: Optional[str] = None

    @classmethod
    def pending(cls) -> "AutomationStatus":
        return cls(AutomationState.PENDING)

    @classmethod
    def running(cls) -> "AutomationStatus":
        return cls(AutomationState.RUNNING)

    @classmethod
    def failed(cls, reason: str) -> "AutomationStatus":
        return cls(AutomationState.FAILED, reason)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AutomationStatus":
        """Parse `{"status": "Running"}` or `{"status": {"Failed": "reason"}}`"""
        status = data["status"]
        if isinstance(status, dict) and "Failed" in status:
            return cls.failed(str(status["Failed"]))
        if status == AutomationState.PENDING.value:
            return cls.pending()
        if status == AutomationState.RUNNING.value:
            return cls.running()
        raise ValueError(f"Unknown automation status: {status!r}")

    @property
    def is_active(self) -> bool:
        return self.state is not AutomationState.FAILED

    @property
    def label(self) -> str:
        if self.state is AutomationState.FAILED:
            return self.reason or "failed"
        return self.state.value.lower()


@dataclass(frozen=True)
class AutomationParams:
    interval_seconds: int
    amount_wei: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "interval_secs": self.interval_seconds,
            "amount_wei": str(self.amount_wei),
        }


@dataclass(frozen=True)
class Credentials:
    """Operator key used to authenticate against the service"""
    signer: LocalAccount

    @property
    def address(self) -> str:
        return self.signer.address
