"""
Deploy-everything module registry

Keeps the ordered list of deployment modules a project runs with
`cantrips deploy-everything run`, persisted in ignition/deploy-everything.json
(a file meant to be committed). Order of insertion is the execution order.
"""

import os
import json
import logging
import posixpath
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ..errors import (
    CantripsError,
    DuplicateModuleError,
    ExternalExecutionError,
    InvalidModuleError,
    RegistryModuleNotFoundError,
    UnresolvableModuleError,
)

logger = logging.getLogger(__name__)

STORE_RELATIVE_PATH = os.path.join("ignition", "deploy-everything.json")
MODULE_SUFFIX = ".py"


@dataclass(frozen=True)
class ModuleReference:
    """One registry entry; (path, external) is its identity"""
    path: str
    external: bool = False

    def to_json(self) -> Dict[str, Any]:
        return {'filename': self.path, 'external': self.external}

    @classmethod
    def from_json(cls, entry: Dict[str, Any]) -> "ModuleReference":
        external = entry.get('external', False)
        if not isinstance(external, bool):
            raise ValueError(f"Entry {entry.get('filename')!r} has a non-boolean 'external' value: {external!r}")
        return cls(path=str(entry['filename']), external=external)

    def __str__(self):
        return f"{self.path} (external)" if self.external else self.path


def split_external(path: str) -> Tuple[str, str]:
    """
    Splits an external specifier into (top-level package, relative file).

    Both `pkg/ignition/modules/Token.py` and `pkg.ignition.modules.Token`
    give ('pkg', 'ignition/modules/Token.py').
    """
    if "/" in path or path.endswith(MODULE_SUFFIX):
        package, _, rest = path.partition("/")
        if rest and not rest.endswith(MODULE_SUFFIX):
            rest += MODULE_SUFFIX
    else:
        package, _, rest = path.partition(".")
        rest = rest.replace(".", "/") + MODULE_SUFFIX if rest else ""
    if not package or not rest:
        raise UnresolvableModuleError(f"The external module {path} does not name a file inside a package")
    return package, rest


def normalize_module_path(path: str, external: bool, project_root: str) -> ModuleReference:
    """
    Normalizes a module path into the form stored in the registry

    Args:
        path: Module path as given by the user
        external: Whether the module lives in an installed package
        project_root: Absolute path of the project root

    Returns:
        The normalized reference
    """
    path = (path or "").strip()
    if not path:
        raise InvalidModuleError("No module path was given")

    if external:
        if path.startswith("/") or os.path.isabs(path):
            raise InvalidModuleError(
                f"External module {path} must be a package-relative path, not an absolute one"
            )
        if ".." in path.replace("\\", "/").split("/"):
            raise InvalidModuleError(f"External module {path} must not contain '..' segments")
        return ModuleReference(path=path, external=True)

    root = os.path.abspath(project_root)
    absolute = path if os.path.isabs(path) else os.path.join(root, path)
    relative = os.path.relpath(os.path.normpath(absolute), root)
    relative = posixpath.normpath(relative.replace(os.sep, "/"))

    if relative == "." or relative == ".." or relative.startswith("../"):
        raise InvalidModuleError(f"Module {path} is not inside the project root {root}")
    return ModuleReference(path=relative, external=False)


class ModuleRegistry:
    """
    Ordered, persisted list of deployment modules.

    The store is read lazily on first access and rewritten in full after
    every successful mutation. There is no locking: two invocations
    mutating the registry at once race, and the last write wins.
    """

    def __init__(self, project_root: str, resolver=None, store_path: Optional[str] = None):
        self.project_root = os.path.abspath(project_root)
        self.resolver = resolver
        self.store_path = store_path or os.path.join(self.project_root, STORE_RELATIVE_PATH)
        self._entries: Optional[List[ModuleReference]] = None

    def _load(self) -> List[ModuleReference]:
        if self._entries is None:
            self._entries = self._read_store()
        return self._entries

    def _read_store(self) -> List[ModuleReference]:
        if not os.path.exists(self.store_path):
            return []
        try:
            with open(self.store_path, 'r', encoding='utf-8') as f:
                settings = json.load(f)
            return [ModuleReference.from_json(entry) for entry in settings.get('contents') or []]
        except (OSError, ValueError, TypeError, KeyError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable module registry {self.store_path}: {e}")
            return []

    def _save(self, entries: List[ModuleReference]):
        os.makedirs(os.path.dirname(self.store_path), exist_ok=True)
        with open(self.store_path, 'w', encoding='utf-8') as f:
            json.dump({'contents': [entry.to_json() for entry in entries]}, f, indent=2)
        self._entries = entries

    def normalize(self, path: str, external: bool) -> ModuleReference:
        return normalize_module_path(path, external, self.project_root)

    def same_target_entries(self, reference: ModuleReference) -> List[ModuleReference]:
        """Registered external entries spelled differently but naming the same package file"""
        if not reference.external:
            return []
        try:
            target = split_external(reference.path)
        except UnresolvableModuleError:
            return []

        found = []
        for entry in self._load():
            if not entry.external or entry == reference:
                continue
            try:
                if split_external(entry.path) == target:
                    found.append(entry)
            except UnresolvableModuleError:
                continue
        return found

    def add(self, path: str, external: bool = False, chain_id: Optional[int] = None) -> ModuleReference:
        """
        Registers a module after checking that it can be resolved

        Returns:
            The stored reference
        """
        reference = self.normalize(path, external)
        if self.resolver is not None:
            self.resolver.resolve(reference, chain_id)

        entries = self._load()
        if reference in entries:
            raise DuplicateModuleError(f"Module {reference} is already registered")
        for entry in self.same_target_entries(reference):
            logger.warning(
                f"Module {reference} names the same file as the registered {entry}; "
                f"running both would deploy the module twice under one id"
            )

        self._save(entries + [reference])
        logger.info(f"Module {reference} added to deploy-everything")
        return reference

    def remove(self, path: str, external: bool = False) -> ModuleReference:
        reference = self.normalize(path, external)
        entries = self._load()
        if reference not in entries:
            raise RegistryModuleNotFoundError(f"Module {reference} is not registered")

        self._save([entry for entry in entries if entry != reference])
        logger.info(f"Module {reference} removed from deploy-everything")
        return reference

    def contains(self, path: str, external: bool = False) -> bool:
        return self.normalize(path, external) in self._load()

    def list(self) -> List[ModuleReference]:
        return list(self._load())

    def run_all(self, executor, options, chain_id: Optional[int] = None, journal=None,
                reset_first: bool = False) -> List[ModuleReference]:
        """
        Executes every registered module, in order, through the executor.

        Every entry is resolved before anything runs, and two entries whose
        modules share a module id are rejected. The run stops at the first
        failure. Modules that ran before it keep their effects; nothing is
        rolled back or retried.

        Args:
            executor: Object with deploy(resolved_module, options); deploy
                returns False when the module was already deployed
            options: DeploymentOptions shared by every module
            chain_id: Current chain id, for chain-scoped module files
            journal: Deployment journal (required when reset_first is set)
            reset_first: Clear the journal of options.deployment_id first

        Returns:
            The references that were executed (already deployed ones excluded)
        """
        if self.resolver is None:
            raise CantripsError("A module resolver is required to run the deployment")

        resolved_modules = [self.resolver.resolve(reference, chain_id) for reference in self.list()]
        owners: Dict[str, ModuleReference] = {}
        for resolved in resolved_modules:
            owner = owners.setdefault(resolved.module_id, resolved.reference)
            if owner != resolved.reference:
                raise InvalidModuleError(
                    f"Modules {owner} and {resolved.reference} share the module id {resolved.module_id}. "
                    f"Rename one of the files or set MODULE_ID in it."
                )

        if reset_first:
            if journal is None:
                raise CantripsError("A deployment journal is required to reset the deployment")
            logger.warning(f"Resetting deployment {options.deployment_id}")
            journal.reset(options.deployment_id)

        applied: List[ModuleReference] = []
        for resolved in resolved_modules:
            reference = resolved.reference
            logger.info(f"Running deployment module {reference}")
            try:
                ran = executor.deploy(resolved, options)
            except Exception as e:
                raise ExternalExecutionError(
                    f"Deployment module {reference} failed: {e}", reference, applied
                ) from e
            if ran is False:
                logger.info(f"Module {reference} was already deployed")
                continue
            applied.append(reference)

        logger.info(f"Deployment finished: {len(applied)} module(s) executed")
        return applied
