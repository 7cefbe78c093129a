import re

from ..errors import InvalidInputError

CHAIN_ID_PATTERN = re.compile(r'^[1-9]\d*$')


def parse_chain_id(chain_id) -> int:
    """Parses a chain id (a base-10 positive integer)"""
    chain_id = str(chain_id if chain_id is not None else "").strip()
    if not CHAIN_ID_PATTERN.match(chain_id):
        raise InvalidInputError("Invalid chain id. Must be a base-10 positive number.")
    return int(chain_id)


def default_deployment_id(chain_id: int) -> str:
    return f"chain-{chain_id}"
