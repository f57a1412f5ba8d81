"""Parsing of operator-entered keys and addresses"""

import json

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3

from errors import InvalidAddressError, InvalidKeyError


def parse_private_key(raw: str) -> LocalAccount:
    """
    Build a signer from a private key

    Accepts a hex string (with or without 0x) or a JSON array of bytes.
    """
    raw = raw.strip()
    key: object = raw
    if raw.startswith("["):
        try:
            key = bytes(json.loads(raw))
        except (ValueError, TypeError) as e:
            raise InvalidKeyError(f"Key is not a byte array: {e}") from e
    try:
        return Account.from_key(key)
    except Exception as e:
        # eth_keys reports bad lengths with its own ValidationError
        raise InvalidKeyError(str(e)) from e


def parse_address(raw: str) -> str:
    """Validate an address and return its checksummed form"""
    raw = raw.strip()
    if not Web3.is_address(raw):
        raise InvalidAddressError(f"{raw} is not a valid address")
    return Web3.to_checksum_address(raw)


def short_address(address: str) -> str:
    return f"{address[:6]}...{address[-4:]}"
