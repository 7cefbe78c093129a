"""
Command-line tasks; importing this package registers all of them in TASKS
"""

from . import (  # noqa: F401
    deploy_everything,
    erc20,
    erc721,
    erc1155,
    generate_contract,
    generate_deployment,
    ipfs,
    ownership,
    transfer,
)
from .common import TASKS

__all__ = ['TASKS']
