"""Utils module exports"""

from .converters import format_native, from_wei, to_wei, token_ui_amount
from .keys import parse_address, parse_private_key, short_address

__all__ = [
    'format_native',
    'from_wei',
    'to_wei',
    'token_ui_amount',
    'parse_address',
    'parse_private_key',
    'short_address',
]
