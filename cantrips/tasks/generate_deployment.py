"""
Deployment module scaffolding for compiled contracts
"""

import os
import re
import logging
from typing import List, Optional

from ..utils.contracts import ContractArtifact, collect_contract_names
from ..utils.input import check_not_interactive, given_or_input_until, input_until, select
from ..utils.templates import apply_template
from .common import argument, force_non_interactive, task

logger = logging.getLogger(__name__)

MODULE_NAME_PATTERN = re.compile(r'^[A-Za-z][A-Za-z0-9]*$')
ADDRESS_PATTERN = re.compile(r'^0x[a-fA-F0-9]{40}$')
SCOPE_TYPES = ("specific", "default")


def unique_contracts(artifacts: List[ContractArtifact]) -> List[ContractArtifact]:
    """Drops (with a warning) contract names defined by more than one artifact"""
    seen = {}
    for artifact in artifacts:
        seen.setdefault(artifact.name, []).append(artifact)

    unique = []
    for name, matches in seen.items():
        if len(matches) > 1:
            logger.warning(
                f"The name '{name}' seems to be repeated. A deployment module referencing it "
                f"would fail on execution due to the conflicting artifact name, so it will not "
                f"be included in the list of available options."
            )
        else:
            unique.append(matches[0])
    return unique


def select_contract(artifacts_path: str, contract_name: Optional[str], force_non_interactive: bool) -> str:
    candidates = unique_contracts(collect_contract_names(artifacts_path))
    if contract_name and any(a.name == contract_name for a in candidates):
        return contract_name

    check_not_interactive(force_non_interactive)
    return select("Select a contract to deploy:", [
        (a.name, f"{a.name} (artifact: artifacts/contracts/{a.path})") for a in candidates
    ])


def select_scope_type(scope_type: Optional[str], network_name: str, force_non_interactive: bool) -> str:
    scope_type = (scope_type or "").strip()
    if scope_type in SCOPE_TYPES:
        return scope_type

    check_not_interactive(force_non_interactive)
    return select("What's this deployment intended for?", [
        ("specific", f"A chain-specific deployment for the network: {network_name}"),
        ("default", "A general/default deployment"),
    ])


def select_reference(reference: Optional[str], scope_type: str, force_non_interactive: bool) -> str:
    """Either "new" or the address of an existing contract"""
    reference = (reference or "").strip()
    if reference == "new" or ADDRESS_PATTERN.match(reference):
        return reference
    if scope_type == "default":
        return "new"

    check_not_interactive(force_non_interactive)
    return input_until(
        "new", "Enter the existing contract's address (or 'new'):",
        lambda v: v == "new" or bool(ADDRESS_PATTERN.match(v)), "Invalid address"
    )


def module_file_name(module_name: str, scope_type: str, chain_id: Optional[int]) -> str:
    if scope_type == "specific":
        return f"{module_name}-{chain_id}.py"
    return f"{module_name}.py"


@task("generate-deployment", "Generates a deployment module for an existing contract",
      failure_message="Could not generate the deployment module:")
@argument("--contract-name", help="An optional existing contract name")
@argument("--module-name", help="An optional deployment module name")
@argument("--reference", help="Either 'new' (deploy a new contract) or the address of an existing contract")
@argument("--scope-type", choices=SCOPE_TYPES,
          help="Whether it is intended for the current network (specific) or for the general case (default)")
@force_non_interactive
def generate_deployment(context, args):
    contract_name = select_contract(context.artifacts_path, args.contract_name, args.force_non_interactive)
    module_name = given_or_input_until(
        args.module_name, contract_name, "Give a name to your deployment:",
        lambda v: bool(MODULE_NAME_PATTERN.match(v)), "Invalid deployment name.",
        args.force_non_interactive
    )
    scope_type = select_scope_type(args.scope_type, context.settings.network_name, args.force_non_interactive)
    reference = select_reference(args.reference, scope_type, args.force_non_interactive)
    chain_id = context.get_chain_id() if scope_type == "specific" else None

    if reference == "new":
        template = "ignition/ContractCreation.py.template"
    else:
        template = "ignition/ContractReference.py.template"
    target_path = os.path.join(context.modules_path, module_file_name(module_name, scope_type, chain_id))
    apply_template(template, {
        'MODULE_NAME': module_name,
        'CONTRACT_NAME': contract_name,
        'CONTRACT_ADDRESS': "" if reference == "new" else reference,
    }, target_path)
    print(f"Deployment {target_path} successfully created.")
