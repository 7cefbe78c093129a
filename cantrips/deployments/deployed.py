"""
Lookup of contracts recorded in a deployment journal
"""

import logging
from typing import List, Optional

from ..errors import DeploymentLookupError
from ..utils.chains import default_deployment_id
from ..utils.input import check_not_interactive, select
from .journal import DeploymentJournal

logger = logging.getLogger(__name__)


def journal_for(context) -> DeploymentJournal:
    return DeploymentJournal(context.deployments_path)


def resolve_deployment_id(context, deployment_id: Optional[str]) -> str:
    deployment_id = (deployment_id or "").strip()
    return deployment_id or default_deployment_id(context.get_chain_id())


def list_deployed_contract_ids(context, deployment_id: Optional[str] = None) -> List[str]:
    deployment_id = resolve_deployment_id(context, deployment_id)
    return sorted(journal_for(context).deployed_addresses(deployment_id))


def select_deployed_contract(context, contract_id: Optional[str], deployment_id: Optional[str],
                             force_non_interactive: bool = False) -> str:
    """
    Keeps the given contract id when it is deployed; otherwise prompts for one

    Returns:
        A contract id, as Module#Contract
    """
    contract_ids = list_deployed_contract_ids(context, deployment_id)
    contract_id = (contract_id or "").strip()
    if contract_id in contract_ids:
        return contract_id
    if contract_id:
        logger.error(f"The contract id {contract_id} is not deployed")
    if not contract_ids:
        raise DeploymentLookupError(
            f"There are no deployed contracts in {resolve_deployment_id(context, deployment_id)}"
        )

    check_not_interactive(force_non_interactive)
    return select("Select a deployed contract:", [(cid, cid) for cid in contract_ids])


def get_deployed_contract(context, deployment_id: Optional[str], contract_id: str, abi=None):
    """
    Builds a web3 contract for a recorded contract id

    Args:
        context: Invocation context
        deployment_id: Deployment id (defaults to chain-<chainId>)
        contract_id: Module#Contract id
        abi: ABI used when the journal holds none for the contract

    Returns:
        The web3 contract
    """
    deployment_id = resolve_deployment_id(context, deployment_id)
    journal = journal_for(context)

    address = journal.deployed_addresses(deployment_id).get(contract_id)
    if address is None:
        raise DeploymentLookupError(f"Contract {contract_id} is not deployed in {deployment_id}")

    recorded_abi = journal.contract_abi(deployment_id, contract_id)
    if recorded_abi is None and abi is None:
        raise DeploymentLookupError(f"No ABI recorded for {contract_id} in {deployment_id}")

    w3 = context.get_web3()
    return w3.eth.contract(address=w3.to_checksum_address(address), abi=recorded_abi or abi)
