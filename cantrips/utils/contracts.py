"""
Compiled contract artifacts (artifacts/contracts/**/<Name>.json)
"""

import os
import json
from dataclasses import dataclass
from typing import Any, Dict, List

from ..errors import DeploymentLookupError


@dataclass
class ContractArtifact:
    name: str
    # Path relative to artifacts/contracts
    path: str


def collect_contract_names(artifacts_path: str) -> List[ContractArtifact]:
    """
    Collects all the contract names from the compiled artifacts

    Args:
        artifacts_path: The project's artifacts directory

    Returns:
        Artifacts found, in directory-walk order
    """
    root = os.path.join(artifacts_path, "contracts")
    if not os.path.isdir(root):
        raise DeploymentLookupError(f"It seems that {root} is not a directory. Compile your contracts first.")

    found = []
    for directory, subdirs, files in os.walk(root):
        subdirs.sort()
        for filename in sorted(files):
            if filename.endswith('.json') and not filename.endswith('.dbg.json'):
                relative = os.path.relpath(os.path.join(directory, filename), root)
                found.append(ContractArtifact(name=filename[:-len('.json')], path=relative.replace(os.sep, '/')))
    return found


def load_artifact(artifacts_path: str, contract_name: str) -> Dict[str, Any]:
    """Loads the artifact (abi, bytecode) of a uniquely named contract"""
    matches = [a for a in collect_contract_names(artifacts_path) if a.name == contract_name]
    if not matches:
        raise DeploymentLookupError(f"No compiled artifact found for contract {contract_name}")
    if len(matches) > 1:
        paths = ", ".join(a.path for a in matches)
        raise DeploymentLookupError(f"The contract name {contract_name} is ambiguous: {paths}")

    with open(os.path.join(artifacts_path, "contracts", matches[0].path), 'r') as f:
        return json.load(f)
