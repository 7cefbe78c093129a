"""
Deploy-everything: module registry, resolution, journal and execution
"""

from .registry import ModuleReference, ModuleRegistry, normalize_module_path
from .resolver import FileModuleResolver, ModuleResolver, ResolvedModule
from .journal import DeploymentJournal
from .executor import DeploymentOptions, ModuleDeployment, Web3Executor

__all__ = [
    'ModuleReference', 'ModuleRegistry', 'normalize_module_path',
    'FileModuleResolver', 'ModuleResolver', 'ResolvedModule',
    'DeploymentJournal',
    'DeploymentOptions', 'ModuleDeployment', 'Web3Executor',
]
