"""
Error types raised by cantrips tasks and the deploy-everything registry
"""


class CantripsError(Exception):
    """Base class for every error reported by cantrips"""


class InvalidModuleError(CantripsError):
    """A module path is malformed or escapes the project root"""


class UnresolvableModuleError(CantripsError):
    """A module could not be located or imported"""

    def __init__(self, message, attempted=None):
        super().__init__(message)
        self.attempted = list(attempted or [])


class DuplicateModuleError(CantripsError):
    """The module is already registered"""


class RegistryModuleNotFoundError(CantripsError):
    """The module is not registered"""


class ExternalExecutionError(CantripsError):
    """A deployment module failed while being executed"""

    def __init__(self, message, reference=None, applied=None):
        super().__init__(message)
        self.reference = reference
        self.applied = list(applied or [])


class InvalidInputError(CantripsError, ValueError):
    """A user-provided value could not be parsed"""


class NonInteractiveError(CantripsError):
    """A prompt was required but the command runs non-interactively"""


class DeploymentLookupError(CantripsError):
    """A deployed contract could not be found in the deployment journal"""


class TemplateError(CantripsError):
    """A generation template is missing or the target cannot be written"""


class ConnectionFailedError(CantripsError):
    """The configured RPC node is not reachable"""


class IpfsError(CantripsError):
    """The local IPFS daemon could not be set up, reached or stopped"""
