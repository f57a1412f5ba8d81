"""Utility functions for currency conversion"""

from decimal import Decimal

WEI_PER_NATIVE = Decimal("1000000000000000000")  # 10^18


def to_wei(native_amount: Decimal) -> int:
    """
    Convert a native coin amount to Wei

    Args:
        native_amount: Amount in whole coins

    Returns:
        Amount in Wei, truncated towards zero
    """
    return int(Decimal(native_amount) * WEI_PER_NATIVE)


def from_wei(wei_amount: int) -> Decimal:
    """
    Convert Wei to whole coins

    Args:
        wei_amount: Amount in Wei

    Returns:
        Amount in coins as Decimal
    """
    return Decimal(wei_amount) / WEI_PER_NATIVE


def token_ui_amount(raw_amount: int, decimals: int) -> Decimal:
    """Scale a raw token amount by the token's decimals"""
    return Decimal(raw_amount) / (Decimal(10) ** decimals)


def format_native(wei_amount: int, places: int = 4) -> str:
    return f"{from_wei(wei_amount):.{places}f}"
