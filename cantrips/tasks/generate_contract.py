"""
Contract scaffolding from OpenZeppelin-based templates
"""

import os
import re
import logging
from typing import List, Optional

from ..errors import InvalidInputError
from ..utils.input import check_not_interactive, given_or_input_until, select
from ..utils.templates import apply_template
from .common import argument, force_non_interactive, task

logger = logging.getLogger(__name__)

CONTRACT_NAME_PATTERN = re.compile(r'^[A-Za-z][A-Za-z0-9]*$')
VERSION_PATTERN = re.compile(r'^\d+\.\d+\.\d+$')

# The only supported options in the generator
OPTIONS = [
    ("ERC20", "A regular, OpenZeppelin-powered, ERC20 contract file"),
    ("OwnedERC20", "An owned, OpenZeppelin-powered, ERC20 contract file"),
    ("ERC721", "A regular, OpenZeppelin-powered, ERC721 contract file"),
    ("OwnedERC721", "An owned, OpenZeppelin-powered, ERC721 contract file"),
    ("ERC1155", "A regular, OpenZeppelin-powered, ERC1155 contract file"),
    ("OwnedERC1155", "An owned, OpenZeppelin-powered, ERC1155 contract file"),
]


def valid_solidity_versions(versions: List[str]) -> List[str]:
    return [v.strip() for v in versions if VERSION_PATTERN.match(v.strip())]


def get_greatest_solidity_version(versions: List[str]) -> str:
    if not versions:
        raise InvalidInputError(
            "The current configuration has no valid compiler entries. "
            "Set CANTRIPS_SOLIDITY_VERSIONS to at least one x.y.z version."
        )
    return max(versions, key=lambda v: tuple(int(part) for part in v.split(".")))


def select_contract_type(contract_type: Optional[str], force_non_interactive: bool = False) -> str:
    contract_type = (contract_type or "").strip()
    if contract_type in [name for name, _ in OPTIONS]:
        return contract_type
    if contract_type:
        logger.error(f"You've chosen a contract type not (yet) supported: {contract_type}")

    check_not_interactive(force_non_interactive)
    return select("Select a contract type:", OPTIONS)


def select_solidity_version(configured: List[str], version: Optional[str] = None,
                            force_non_interactive: bool = False) -> str:
    versions = valid_solidity_versions(configured)
    greatest = get_greatest_solidity_version(versions)
    version = (version or "").strip()
    if version in versions:
        return version
    if len(versions) == 1 or force_non_interactive:
        return greatest
    return select("Select one of the installed Solidity versions:",
                  [(v, v) for v in versions], initial=greatest)


@task("generate-contract", "Generates a contract file from a template",
      failure_message="Could not generate the contract:")
@argument("--contract-type", help="One of: " + ", ".join(name for name, _ in OPTIONS))
@argument("--contract-name", help="The name of the new contract")
@argument("--solidity-version", help="One of the configured Solidity versions")
@force_non_interactive
def generate_contract(context, args):
    contract_type = select_contract_type(args.contract_type, args.force_non_interactive)
    contract_name = given_or_input_until(
        args.contract_name, contract_type, "Give a name to your contract:",
        lambda v: bool(CONTRACT_NAME_PATTERN.match(v)), "Invalid contract name",
        args.force_non_interactive
    )
    solidity_version = select_solidity_version(
        context.settings.solidity_versions, args.solidity_version, args.force_non_interactive
    )

    target_path = os.path.join(context.sources_path, f"{contract_name}.sol")
    apply_template(f"contracts/{contract_type}.sol.template", {
        'SOLIDITY_VERSION': solidity_version,
        'CONTRACT_NAME': contract_name,
    }, target_path)
    print(f"Contract {target_path} successfully created")


@task("show-config", "Shows the current cantrips configuration")
def show_config(context, args):
    settings = context.settings
    print(f"Project root: {settings.project_root}")
    print(f"Network: {settings.network_name} ({settings.rpc_url})")
    print(f"Chain id: {settings.chain_id if settings.chain_id is not None else 'from the node'}")
    print(f"Accounts: {len(settings.private_keys) or 'node-managed'}")
    print(f"Solidity: {', '.join(settings.solidity_versions)}")
