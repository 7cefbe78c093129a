"""
Task declaration helpers

Tasks declare their command-line options with decorators and are collected
in TASKS, from which the CLI builds its sub-commands:

    @task("erc721:get-metadata", "Gets the metadata of an ERC721 contract")
    @argument("--contract-id", help="...")
    def get_metadata(context, args):
        ...
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

FORCE_NON_INTERACTIVE_HELP = (
    "Raise an error if one or more params were not specified and the action would become interactive"
)
CONTRACT_ID_HELP = "A contract id, specified as DeploymentModule#ContractId for the current network"
DEPLOYMENT_ID_HELP = "The deployment id to get the contract from (it MUST match the current network)"


@dataclass
class Task:
    name: str
    description: str
    action: Callable
    arguments: List[Tuple[tuple, dict]] = field(default_factory=list)
    # Printed before the error when the action fails
    failure_message: Optional[str] = None


TASKS: Dict[str, Task] = {}


def task(name: str, description: str = "", failure_message: Optional[str] = None):
    def decorator(action):
        arguments = list(reversed(getattr(action, '_task_arguments', [])))
        TASKS[name] = Task(name, description, action, arguments, failure_message)
        return action
    return decorator


def argument(*flags, **kwargs):
    def decorator(action):
        action._task_arguments = getattr(action, '_task_arguments', []) + [(flags, kwargs)]
        return action
    return decorator


def force_non_interactive(action):
    return argument("--force-non-interactive", action="store_true", help=FORCE_NON_INTERACTIVE_HELP)(action)


def deployed_contract_options(action):
    """--contract-id and --deployment-id, shared by the token tasks"""
    action = argument("--deployment-id", help=DEPLOYMENT_ID_HELP)(action)
    return argument("--contract-id", help=CONTRACT_ID_HELP)(action)
