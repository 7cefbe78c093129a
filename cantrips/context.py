"""
Per-invocation context shared by every cantrips task
"""

import os
import logging
from typing import List, Optional
from web3 import Web3
from web3.middleware import ExtraDataToPOAMiddleware

from .config import Settings
from .errors import ConnectionFailedError
from .utils.accounts import Signer

logger = logging.getLogger(__name__)


class CantripsContext:
    """
    Holds the settings, project paths and the (lazily connected) chain
    client for a single command invocation.
    """

    def __init__(self, settings: Settings, w3: Optional[Web3] = None):
        self.settings = settings
        self.w3: Optional[Web3] = w3
        self._chain_id: Optional[int] = settings.chain_id
        self._signers: Optional[List[Signer]] = None

    @property
    def project_root(self) -> str:
        return self.settings.project_root

    @property
    def sources_path(self) -> str:
        return os.path.join(self.project_root, "contracts")

    @property
    def artifacts_path(self) -> str:
        return os.path.join(self.project_root, "artifacts")

    @property
    def ignition_path(self) -> str:
        return os.path.join(self.project_root, "ignition")

    @property
    def modules_path(self) -> str:
        return os.path.join(self.ignition_path, "modules")

    @property
    def deployments_path(self) -> str:
        return os.path.join(self.ignition_path, "deployments")

    def get_web3(self) -> Web3:
        """Connect to the configured RPC node on first use"""
        if self.w3 is None:
            w3 = Web3(Web3.HTTPProvider(self.settings.rpc_url))
            w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
            if not w3.is_connected():
                raise ConnectionFailedError(f"Could not connect to RPC URL: {self.settings.rpc_url}")
            logger.info(f"Connected to {self.settings.network_name} at {self.settings.rpc_url}")
            self.w3 = w3
        return self.w3

    def get_chain_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = int(self.get_web3().eth.chain_id)
        return self._chain_id

    def get_signers(self) -> List[Signer]:
        """
        List the accounts able to sign transactions.

        Configured private keys take precedence; otherwise the node's
        unlocked accounts are used (as on a local development node).
        """
        if self._signers is None:
            w3 = self.get_web3()
            if self.settings.private_keys:
                self._signers = [
                    Signer(address=account.address, account=account)
                    for account in (w3.eth.account.from_key(key) for key in self.settings.private_keys)
                ]
            else:
                self._signers = [Signer(address=address) for address in w3.eth.accounts]
        return self._signers

    def network_config(self) -> dict:
        """Network parameters handed to deployment modules"""
        return {
            'name': self.settings.network_name,
            'rpc_url': self.settings.rpc_url,
            'chain_id': self.get_chain_id(),
            'gas_limit': self.settings.gas_limit,
        }

    def __repr__(self):
        return f"<CantripsContext root={self.project_root} network={self.settings.network_name}>"
