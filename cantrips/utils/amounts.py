"""
Native and token amount parsing
"""

import re
from decimal import Decimal
from web3 import Web3

from ..errors import InvalidInputError

WEI_PATTERN = re.compile(r'^\d+$')
ETH_PATTERN = re.compile(r'^(\d+(\.\d+)?)\s*eth$', re.IGNORECASE)
TOKEN_ID_PATTERN = re.compile(r'^(\d+|0x[a-fA-F0-9]+)$')


def is_amount(value: str) -> bool:
    value = (value or "").strip()
    return bool(WEI_PATTERN.match(value) or ETH_PATTERN.match(value))


def parse_amount(amount) -> int:
    """
    Parses an amount given in wei ("3000000000000000000") or in
    ether ("1.5eth", "2 ETH").

    Returns:
        The amount in wei (0 when empty)
    """
    amount = (amount or "").strip()
    if not amount:
        return 0

    if WEI_PATTERN.match(amount):
        return int(amount)

    match = ETH_PATTERN.match(amount)
    if match:
        return int(Web3.to_wei(Decimal(match.group(1)), 'ether'))

    raise InvalidInputError("The specified amount is not valid.")


def parse_token_id(token_id) -> int:
    """Parses a token id given in base 10 or as 0x-prefixed hex"""
    token_id = (token_id or "").strip()
    if not TOKEN_ID_PATTERN.match(token_id):
        raise InvalidInputError("Invalid token id")
    return int(token_id, 16) if token_id.lower().startswith("0x") else int(token_id)
