"""vmdeck deployment engine.

This package provides the deployment state store, the current VM record,
cloud providers and the VM provisioning coordinator.
"""

from vmdeck.deploy.state import DeploymentStateService, load_state, save_state
from vmdeck.deploy.vm.manager import VMManager
from vmdeck.deploy.vm.vm import VM
from vmdeck.deploy.vm_repo import VMRepo

__all__ = [
    "DeploymentStateService",
    "VM",
    "VMManager",
    "VMRepo",
    "load_state",
    "save_state",
]
