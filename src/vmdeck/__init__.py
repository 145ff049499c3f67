"""vmdeck - create and track the VM of a single-VM deployment.

vmdeck persists the identity of the deployment's current VM and agent, and
creates new VMs through a cloud provider so that every created VM is
recorded before any further step can fail.
"""

from vmdeck.lib.errors import ConfigError, DeploymentError, VMDeckError

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ConfigError",
    "DeploymentError",
    "VMDeckError",
]
