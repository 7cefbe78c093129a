"""
deploy-everything: manages and runs the project's full deployment
"""

import os
import json
import logging
from typing import List, Optional

from ..deployments.executor import DeploymentOptions, Web3Executor
from ..deployments.journal import DeploymentJournal
from ..deployments.registry import ModuleRegistry
from ..deployments.resolver import FileModuleResolver
from ..errors import ExternalExecutionError, InvalidInputError
from ..utils.accounts import parse_address
from ..utils.chains import default_deployment_id
from ..utils.input import check_not_interactive, input_until, select
from .common import argument, force_non_interactive, task

logger = logging.getLogger(__name__)

ACTIONS = [
    ("add", "Adds a new deployment module (prompted or via --module)"),
    ("remove", "Removes a deployment module (prompted or via --module)"),
    ("list", "Lists all the deployment modules (sequentially)"),
    ("check", "Tells whether a deployment module is registered (prompted or via --module)"),
    ("run", "Executes all the deployment modules (to the end)"),
]


def choose_action(action: Optional[str], force_non_interactive: bool) -> str:
    """
    Keeps the given action when valid; otherwise prompts for one.

    Args:
        action: The action given in the command line, if any
        force_non_interactive: Fail instead of prompting
    """
    action = (action or "").strip().lower()
    if action in [name for name, _ in ACTIONS]:
        return action
    if action:
        logger.error(f"You've chosen an unsupported action: {action}.")

    check_not_interactive(force_non_interactive)
    return select("Select what to do:", ACTIONS)


def available_module_files(context) -> List[str]:
    """Python files under ignition/modules, relative to the project root"""
    found = []
    for directory, subdirs, files in os.walk(context.modules_path):
        subdirs.sort()
        for filename in sorted(files):
            if filename.endswith(".py") and not filename.startswith("_"):
                path = os.path.relpath(os.path.join(directory, filename), context.project_root)
                found.append(path.replace(os.sep, "/"))
    return found


def build_registry(context) -> ModuleRegistry:
    return ModuleRegistry(context.project_root, FileModuleResolver(context.project_root))


def prompt_module_to_add(context, external: bool, force_non_interactive: bool) -> str:
    check_not_interactive(force_non_interactive)
    if external:
        return input_until(
            "", "Module path inside its package (e.g. mypackage/ignition/modules/Token.py):",
            lambda v: bool(v) and not v.startswith("/"), "Invalid module path"
        )

    candidates = available_module_files(context)
    if not candidates:
        raise InvalidInputError(f"There are no deployment modules in {context.modules_path}")
    return select("Select a deployment module:", [(path, path) for path in candidates])


def prompt_registered_module(registry: ModuleRegistry, external: bool, force_non_interactive: bool) -> str:
    check_not_interactive(force_non_interactive)
    candidates = [entry for entry in registry.list() if entry.external == external]
    if not candidates:
        kind = "external" if external else "local"
        raise InvalidInputError(f"There are no {kind} modules registered")
    return select("Select a registered module:", [(entry.path, str(entry)) for entry in candidates])


def optional_chain_id(context) -> Optional[int]:
    """The chain id when a node is reachable; modules can still be added offline"""
    try:
        return context.get_chain_id()
    except Exception as e:
        logger.warning(f"Chain id not available, chain-scoped module files will not be checked: {e}")
        return None


def add(context, module: Optional[str], external: bool, force_non_interactive: bool):
    registry = build_registry(context)
    module = module or prompt_module_to_add(context, external, force_non_interactive)
    reference = registry.add(module, external, optional_chain_id(context))
    print(f"Module {reference} added.")


def remove(context, module: Optional[str], external: bool, force_non_interactive: bool):
    registry = build_registry(context)
    module = module or prompt_registered_module(registry, external, force_non_interactive)
    reference = registry.remove(module, external)
    print(f"Module {reference} removed.")


def check(context, module: Optional[str], external: bool, force_non_interactive: bool):
    registry = build_registry(context)
    if not module:
        check_not_interactive(force_non_interactive)
        module = input_until("", "Module path:", bool, "Invalid module path")
    reference = registry.normalize(module, external)
    if registry.contains(module, external):
        print(f"Module {reference} is registered.")
    else:
        print(f"Module {reference} is not registered.")


def list_modules(context):
    entries = build_registry(context).list()
    if not entries:
        print("There are no deployment modules registered.")
        return
    for index, entry in enumerate(entries, start=1):
        print(f"{index}. {entry}")


def load_json_object(path: Optional[str], description: str) -> dict:
    """Reads an optional JSON file that must hold an object"""
    if not path:
        return {}
    try:
        with open(path, 'r', encoding='utf-8') as f:
            content = json.load(f)
    except (OSError, ValueError) as e:
        raise InvalidInputError(f"Could not load the {description} file {path}: {e}")
    if not isinstance(content, dict):
        raise InvalidInputError(f"The {description} file {path} must contain a JSON object")
    return content


def run(context, parameters: Optional[str], strategy: str, strategy_config: Optional[str],
        deployment_id: Optional[str], default_sender: Optional[str], reset: bool):
    chain_id = context.get_chain_id()
    journal = DeploymentJournal(context.deployments_path)
    options = DeploymentOptions(
        deployment_id=deployment_id or default_deployment_id(chain_id),
        config=context.network_config(),
        strategy=strategy,
        strategy_config=load_json_object(strategy_config, "strategy config"),
        default_sender=parse_address(default_sender, context.get_signers()) if default_sender else None,
        parameters=load_json_object(parameters, "parameters"),
    )

    registry = build_registry(context)
    try:
        applied = registry.run_all(Web3Executor(context, journal), options, chain_id, journal, reset)
    except ExternalExecutionError as e:
        if e.applied:
            logger.error(
                "These modules were already applied and are NOT rolled back: "
                + ", ".join(str(reference) for reference in e.applied)
            )
        logger.error("Remaining modules were not executed. Fix the cause and run again.")
        raise
    skipped = len(registry.list()) - len(applied)
    print(f"Deployment {options.deployment_id} finished: {len(applied)} module(s) executed, "
          f"{skipped} already deployed.")


@task("deploy-everything", "Manages or executes the 'full deployment' in a chain")
@argument("action", nargs="?", help="The action to execute: add, remove, list, check or run")
@force_non_interactive
@argument("--external", action="store_true",
          help="Tells, for add/remove/check, that the module comes from an external package")
@argument("--module", help="Tells the module to add/remove/check")
@argument("--parameters", help="For run: a JSON file with the modules' parameters")
@argument("--strategy", default="basic", help="For run: the deployment strategy")
@argument("--strategy-config", help="For run: a JSON file with settings for the strategy (basic: gas_limit)")
@argument("--deployment-id", help="For run: the deployment id (default: chain-<chainId>)")
@argument("--default-sender", help="For run: index or address of the account sending the transactions")
@argument("--reset", action="store_true", help="For run: wipe the existing deployment state first")
def deploy_everything(context, args):
    action = choose_action(args.action, args.force_non_interactive)
    if action == "add":
        add(context, args.module, args.external, args.force_non_interactive)
    elif action == "remove":
        remove(context, args.module, args.external, args.force_non_interactive)
    elif action == "check":
        check(context, args.module, args.external, args.force_non_interactive)
    elif action == "list":
        list_modules(context)
    elif action == "run":
        run(context, args.parameters, args.strategy, args.strategy_config, args.deployment_id,
            args.default_sender, args.reset)
