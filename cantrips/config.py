"""
Settings and logging setup for cantrips

Settings come from the environment, optionally seeded by a `.env` file in
the working directory.
"""

import os
import logging
from dataclasses import dataclass, field
from typing import List, Optional
from dotenv import load_dotenv

from .utils.chains import parse_chain_id

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _split_list(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    """Runtime settings for one cantrips invocation"""
    project_root: str
    rpc_url: str = "http://localhost:8545"
    network_name: str = "localhost"
    chain_id: Optional[int] = None
    private_keys: List[str] = field(default_factory=list)
    gas_limit: int = 3000000
    solidity_versions: List[str] = field(default_factory=lambda: ["0.8.24"])
    ipfs_api_url: str = "http://127.0.0.1:5001"
    ipfs_gateway_port: int = 8080
    ipfs_api_port: int = 5001
    ipfs_swarm_port: int = 4001
    ipfs_binary: str = "ipfs"

    @classmethod
    def from_env(cls, project_root: Optional[str] = None) -> "Settings":
        """
        Build settings from environment variables

        Args:
            project_root: Explicit project root (overrides CANTRIPS_PROJECT_ROOT)

        Returns:
            Settings instance
        """
        load_dotenv()

        root = project_root or os.getenv("CANTRIPS_PROJECT_ROOT") or os.getcwd()
        chain_id = os.getenv("CHAIN_ID")
        api_port = int(os.getenv("IPFS_API_PORT", "5001"))

        return cls(
            project_root=os.path.abspath(root),
            rpc_url=os.getenv("RPC_URL", "http://localhost:8545"),
            network_name=os.getenv("NETWORK_NAME", "localhost"),
            chain_id=parse_chain_id(chain_id) if chain_id else None,
            private_keys=_split_list(os.getenv("PRIVATE_KEYS")),
            gas_limit=int(os.getenv("CANTRIPS_GAS_LIMIT", "3000000")),
            solidity_versions=_split_list(os.getenv("CANTRIPS_SOLIDITY_VERSIONS", "0.8.24")),
            ipfs_api_url=os.getenv("IPFS_API_URL", f"http://127.0.0.1:{api_port}"),
            ipfs_gateway_port=int(os.getenv("IPFS_GATEWAY_PORT", "8080")),
            ipfs_api_port=api_port,
            ipfs_swarm_port=int(os.getenv("IPFS_SWARM_PORT", "4001")),
            ipfs_binary=os.getenv("IPFS_BINARY", "ipfs"),
        )


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None):
    """Configure root logging once per process"""
    level = level or os.getenv("CANTRIPS_LOG_LEVEL", "INFO")
    log_file = log_file or os.getenv("CANTRIPS_LOG_FILE")

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers
    )
