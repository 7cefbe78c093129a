"""
Account and address parsing
"""

import re
from dataclasses import dataclass
from typing import Any, Optional, Sequence
from web3 import Web3

from ..errors import InvalidInputError

INDEX_PATTERN = re.compile(r'^\d+$')
ADDRESS_PATTERN = re.compile(r'^0x[a-fA-F0-9]{40}$')
INDEX_OR_ADDRESS_PATTERN = re.compile(r'^(\d+|0x[a-fA-F0-9]{40})$')


@dataclass
class Signer:
    """An account able to send transactions"""
    address: str
    # Local account holding a private key; None for node-managed accounts
    account: Optional[Any] = None


def is_index_or_address(value: str) -> bool:
    return bool(INDEX_OR_ADDRESS_PATTERN.match((value or "").strip()))


def parse_account(account: Optional[str], signers: Sequence[Signer]) -> Signer:
    """
    Parses an account index and returns the matching signer

    Args:
        account: Index of the account, as text
        signers: Available signers

    Returns:
        The chosen signer
    """
    account = (account or "").strip()
    if not INDEX_PATTERN.match(account):
        raise InvalidInputError("The chosen account is not valid. Specify a valid index.")

    index = int(account)
    if index >= len(signers):
        raise InvalidInputError("The chosen index is not among the allowed signers.")
    return signers[index]


def parse_address(account: Optional[str], signers: Sequence[Signer]) -> str:
    """
    Parses an account index or an address and returns a checksum address

    Args:
        account: Account index, or 0x-prefixed address, as text
        signers: Available signers (used for indices)

    Returns:
        The checksum address
    """
    account = (account or "").strip()

    if INDEX_PATTERN.match(account):
        return parse_account(account, signers).address
    if ADDRESS_PATTERN.match(account):
        try:
            return Web3.to_checksum_address(account)
        except ValueError:
            raise InvalidInputError("The chosen checksum address is not valid.")
    raise InvalidInputError("The chosen account is not valid. Either specify an index or an address.")
