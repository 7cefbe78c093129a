"""
On-disk record of what a deployment has already done

Layout under ignition/deployments/<deployment_id>/:
- deployed_addresses.json: {"Module#Contract": "0x..."}
- journal.json: {"completed": ["Module", ...]}
- artifacts/<Module#Contract>.json: {"abi": [...]}
"""

import os
import json
import shutil
import logging
from typing import Any, Dict, List

from ..errors import DeploymentLookupError

logger = logging.getLogger(__name__)


class DeploymentJournal:

    def __init__(self, deployments_path: str):
        self.deployments_path = deployments_path

    def directory(self, deployment_id: str) -> str:
        if not deployment_id or os.sep in deployment_id or "/" in deployment_id or deployment_id in (".", ".."):
            raise DeploymentLookupError(f"Invalid deployment id: {deployment_id!r}")
        return os.path.join(self.deployments_path, deployment_id)

    def _read(self, deployment_id: str, filename: str, default):
        path = os.path.join(self.directory(deployment_id), filename)
        if not os.path.exists(path):
            return default
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def _write(self, deployment_id: str, filename: str, data):
        path = os.path.join(self.directory(deployment_id), filename)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)

    def reset(self, deployment_id: str):
        """Deletes everything recorded for the deployment"""
        directory = self.directory(deployment_id)
        if os.path.isdir(directory):
            shutil.rmtree(directory)
            logger.info(f"Deployment {deployment_id} was reset")
        else:
            logger.info(f"Deployment {deployment_id} has no recorded state")

    def completed_modules(self, deployment_id: str) -> List[str]:
        return list(self._read(deployment_id, 'journal.json', {}).get('completed', []))

    def is_complete(self, deployment_id: str, module_id: str) -> bool:
        return module_id in self.completed_modules(deployment_id)

    def deployed_addresses(self, deployment_id: str) -> Dict[str, str]:
        return dict(self._read(deployment_id, 'deployed_addresses.json', {}))

    def contract_abi(self, deployment_id: str, contract_id: str):
        artifact = self._read(deployment_id, os.path.join('artifacts', f'{contract_id}.json'), None)
        return artifact['abi'] if artifact else None

    def record_module(self, deployment_id: str, module_id: str, contracts: Dict[str, Dict[str, Any]]):
        """
        Records a completed module and the contracts it deployed or referenced

        Args:
            deployment_id: Deployment the module ran in
            module_id: Module name
            contracts: {contract name: {"address": ..., "abi": [...]}}
        """
        addresses = self.deployed_addresses(deployment_id)
        for name, contract in contracts.items():
            contract_id = f"{module_id}#{name}"
            addresses[contract_id] = contract['address']
            self._write(deployment_id, os.path.join('artifacts', f'{contract_id}.json'), {'abi': contract['abi']})
        self._write(deployment_id, 'deployed_addresses.json', addresses)

        completed = self.completed_modules(deployment_id)
        if module_id not in completed:
            completed.append(module_id)
        self._write(deployment_id, 'journal.json', {'completed': completed})
