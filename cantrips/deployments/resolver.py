"""
Deployment module resolution

A registry entry points at a Python deployment module. Internal entries are
files under the project root; external entries live inside an installed
package and are located through the import search path. Either way, a
chain-scoped variant of the file (`Token-31337.py` for `Token.py`) wins
over the plain one when it exists.
"""

import os
import logging
import importlib.util
from dataclasses import dataclass
from types import ModuleType
from typing import List, Optional, Tuple

from ..errors import UnresolvableModuleError
from .registry import MODULE_SUFFIX, ModuleReference, split_external

logger = logging.getLogger(__name__)


@dataclass
class ResolvedModule:
    """A registry entry bound to its loaded Python module"""
    reference: ModuleReference
    file_path: str
    module: ModuleType

    @property
    def module_id(self) -> str:
        """Name used for journal keys; a module may set MODULE_ID explicitly"""
        explicit = getattr(self.module, "MODULE_ID", None)
        if explicit:
            return str(explicit)
        base = os.path.basename(self.reference.path)
        if base.endswith(MODULE_SUFFIX):
            base = base[:-len(MODULE_SUFFIX)]
        return base.rsplit(".", 1)[-1]


class ModuleResolver:
    """Resolves a registry entry into a loaded deployment module"""

    def resolve(self, reference: ModuleReference, chain_id: Optional[int] = None) -> ResolvedModule:
        raise NotImplementedError


def chain_scoped_candidates(relative_path: str, chain_id: Optional[int]) -> List[str]:
    """Candidate file names, chain-scoped first"""
    if chain_id is None:
        return [relative_path]
    stem, extension = os.path.splitext(relative_path)
    return [f"{stem}-{chain_id}{extension}", relative_path]


def package_directory(package: str) -> str:
    """Directory of an importable top-level package"""
    try:
        spec = importlib.util.find_spec(package)
    except (ImportError, ValueError) as e:
        raise UnresolvableModuleError(f"Could not locate package {package}: {e}")
    if spec is None:
        raise UnresolvableModuleError(f"Package {package} is not installed")
    if spec.submodule_search_locations:
        return list(spec.submodule_search_locations)[0]
    if spec.origin:
        return os.path.dirname(spec.origin)
    raise UnresolvableModuleError(f"Package {package} has no location on disk")


def load_module_file(file_path: str, reference: ModuleReference) -> ModuleType:
    """Imports a module file under a private name"""
    name = "cantrips_deployment_" + "".join(c if c.isalnum() else "_" for c in reference.path)
    spec = importlib.util.spec_from_file_location(name, file_path)
    if spec is None or spec.loader is None:
        raise UnresolvableModuleError(f"Could not load {file_path}", [file_path])

    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        raise UnresolvableModuleError(f"Could not import {file_path}: {e}", [file_path]) from e
    return module


class FileModuleResolver(ModuleResolver):
    """Resolves internal entries against the project root and external ones against installed packages"""

    def __init__(self, project_root: str):
        self.project_root = project_root

    def base_directory(self, reference: ModuleReference) -> Tuple[str, str]:
        if reference.external:
            package, relative = split_external(reference.path)
            return package_directory(package), relative
        return self.project_root, reference.path

    def resolve(self, reference: ModuleReference, chain_id: Optional[int] = None) -> ResolvedModule:
        base, relative = self.base_directory(reference)

        attempted = []
        for candidate in chain_scoped_candidates(relative, chain_id):
            file_path = os.path.join(base, *candidate.split("/"))
            attempted.append(file_path)
            if os.path.isfile(file_path):
                logger.debug(f"Resolved {reference.path} to {file_path}")
                return ResolvedModule(reference, file_path, load_module_file(file_path, reference))

        raise UnresolvableModuleError(
            f"Could not resolve module {reference.path} (tried: {', '.join(attempted)})", attempted
        )

