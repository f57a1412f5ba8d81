"""Error taxonomy for the console"""

from enum import Enum


class AppError(Exception):
    """Base class for every error a screen can report"""
    category = "An error occured"

    @property
    def detail(self) -> str:
        return str(self)


class ServiceErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    MALFORMED_RESPONSE = "malformed_response"
    TRANSPORT = "transport"
    SERVER_REJECTED = "server_rejected"
    UNHANDLED_SERVER = "unhandled_server"


class ServiceError(AppError):
    """Failure reported by (or while talking to) the trading service"""
    kind: ServiceErrorKind = ServiceErrorKind.SERVER_REJECTED
    category = "Not accepted"


class NotFoundError(ServiceError):
    kind = ServiceErrorKind.NOT_FOUND
    category = "Requested resource was not found"


class UnauthorizedError(ServiceError):
    kind = ServiceErrorKind.UNAUTHORIZED
    category = "Authorization failed"


class MalformedResponseError(ServiceError):
    kind = ServiceErrorKind.MALFORMED_RESPONSE
    category = "Parse error occured"


class TransportError(ServiceError):
    kind = ServiceErrorKind.TRANSPORT
    category = "Connection error occured"


class ServerRejectedError(ServiceError):
    kind = ServiceErrorKind.SERVER_REJECTED
    category = "Not accepted"


class UnhandledServerError(ServiceError):
    kind = ServiceErrorKind.UNHANDLED_SERVER
    category = "Unhandled server error occured"


class PendingSnipeError(AppError):
    """The server gave up on a pending snipe"""
    category = "Pending snipe failed"


class WatcherError(AppError):
    """The cancel watcher could not be started or exited abnormally"""
    category = "Load failed"


class PromptAbortedError(AppError):
    category = "Input aborted"

    def __init__(self, message: str = "Prompt was aborted"):
        super().__init__(message)


class DomainValidationError(AppError):
    category = "Invalid request"


class ProjectNotFoundError(DomainValidationError):
    category = "Project not found"

    def __init__(self, message: str = "Project not found"):
        super().__init__(message)


class UserNotFoundError(DomainValidationError):
    category = "Unable to find user"

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class WalletCountExceededError(DomainValidationError):
    category = "Wallet amount exceeds available wallets"

    def __init__(self, requested: int, available: int):
        super().__init__(f"Requested {requested} wallets but only {available} are available")
        self.requested = requested
        self.available = available


class InvalidAddressError(DomainValidationError):
    category = "Invalid address"


class InvalidKeyError(DomainValidationError):
    category = "Invalid private key"


class UnhandledError(AppError):
    category = "Unhandled error occured"
