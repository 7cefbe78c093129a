"""
Execution of deployment modules against the chain

A deployment module is a Python file defining `deploy(m)`, where `m` is a
ModuleDeployment:

    def deploy(m):
        token = m.contract("MyToken", m.parameter("supply", 10 ** 24))
        m.contract_at("Registry", "0x...")
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..errors import CantripsError, InvalidInputError
from ..utils.accounts import Signer
from ..utils.contracts import load_artifact
from ..utils.transactions import build_params, send_transaction
from .journal import DeploymentJournal
from .resolver import ResolvedModule

logger = logging.getLogger(__name__)

# Settings each strategy accepts in its strategy config
STRATEGY_SETTINGS = {
    "basic": ("gas_limit",),
}


@dataclass
class DeploymentOptions:
    """Settings shared by every module of one deploy-everything run"""
    deployment_id: str
    config: Dict[str, Any] = field(default_factory=dict)
    strategy: str = "basic"
    strategy_config: Dict[str, Any] = field(default_factory=dict)
    default_sender: Optional[str] = None
    parameters: Dict[str, Any] = field(default_factory=dict)


class ModuleDeployment:
    """Handle given to a module's deploy(m) function"""

    def __init__(self, context, module_id: str, options: DeploymentOptions, sender: Signer):
        self.context = context
        self.w3 = context.get_web3()
        self.chain_id = context.get_chain_id()
        self.module_id = module_id
        self.options = options
        self.sender = sender
        self.gas_limit = options.strategy_config.get("gas_limit", context.settings.gas_limit)
        self.contracts: Dict[str, Dict[str, Any]] = {}

    def parameter(self, name: str, default: Any = None) -> Any:
        """A named parameter for this module (from the --parameters file)"""
        return self.options.parameters.get(self.module_id, {}).get(name, default)

    def _register(self, contract_id: str, address: str, abi):
        if contract_id in self.contracts:
            raise CantripsError(f"Contract id {self.module_id}#{contract_id} is used twice")
        self.contracts[contract_id] = {'address': address, 'abi': abi}
        return self.w3.eth.contract(address=address, abi=abi)

    def contract(self, name: str, *args, contract_id: Optional[str] = None, value: int = 0):
        """Deploys a new instance of a compiled contract"""
        artifact = load_artifact(self.context.artifacts_path, name)
        factory = self.w3.eth.contract(abi=artifact['abi'], bytecode=artifact['bytecode'])
        tx = factory.constructor(*args).build_transaction(
            build_params(self.w3, self.sender, self.gas_limit, value)
        )
        receipt = send_transaction(self.w3, self.sender, tx)
        address = receipt['contractAddress']
        logger.info(f"{self.module_id}#{contract_id or name} deployed at {address}")
        return self._register(contract_id or name, address, artifact['abi'])

    def contract_at(self, name: str, address: str, contract_id: Optional[str] = None):
        """References an already deployed contract"""
        artifact = load_artifact(self.context.artifacts_path, name)
        checksum_address = self.w3.to_checksum_address(address)
        return self._register(contract_id or name, checksum_address, artifact['abi'])


class Web3Executor:
    """Runs resolved modules and records them in the deployment journal"""

    def __init__(self, context, journal: DeploymentJournal):
        self.context = context
        self.journal = journal

    def select_sender(self, default_sender: Optional[str]) -> Signer:
        signers = self.context.get_signers()
        if not signers:
            raise CantripsError("There are no accounts available to send transactions")
        if not default_sender:
            return signers[0]
        for signer in signers:
            if signer.address.lower() == default_sender.lower():
                return signer
        raise InvalidInputError(f"The default sender {default_sender} is not among the available accounts")

    def check_strategy(self, options: DeploymentOptions):
        if options.strategy not in STRATEGY_SETTINGS:
            raise InvalidInputError(f"Unsupported deployment strategy: {options.strategy}")
        unknown = sorted(set(options.strategy_config) - set(STRATEGY_SETTINGS[options.strategy]))
        if unknown:
            raise InvalidInputError(
                f"Unknown settings for the {options.strategy} strategy: {', '.join(unknown)}"
            )

    def deploy(self, resolved: ResolvedModule, options: DeploymentOptions) -> bool:
        """
        Runs one module unless the journal already has it

        Returns:
            False when the module was already deployed, True otherwise
        """
        self.check_strategy(options)

        module_id = resolved.module_id
        if self.journal.is_complete(options.deployment_id, module_id):
            logger.info(f"Module {module_id} already deployed in {options.deployment_id}, skipping")
            return False

        deploy = getattr(resolved.module, "deploy", None)
        if not callable(deploy):
            raise CantripsError(f"Module {resolved.file_path} does not define deploy(m)")

        deployment = ModuleDeployment(self.context, module_id, options, self.select_sender(options.default_sender))
        deploy(deployment)
        self.journal.record_module(options.deployment_id, module_id, deployment.contracts)
        logger.info(f"Module {module_id} completed ({len(deployment.contracts)} contract(s))")
        return True
