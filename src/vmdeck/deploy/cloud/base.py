"""Base interface for cloud providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from vmdeck.models.vm import NetworkIdentity, VMMetadata


class BaseCloud(ABC):
    """Abstract base class for the cloud calls made during VM provisioning."""

    @abstractmethod
    def create_vm(
        self,
        agent_id: str,
        stemcell_cid: str,
        cloud_properties: dict[str, Any],
        network_interfaces: dict[str, dict[str, Any]],
        env: dict[str, Any],
    ) -> str:
        """Create a VM and return its cloud identifier.

        Args:
            agent_id: Identifier the in-VM agent will register with.
            stemcell_cid: Cloud identifier of the base image.
            cloud_properties: Provider-specific VM properties.
            network_interfaces: Network settings keyed by network name.
            env: Environment handed to the agent.

        Returns:
            The VM's cloud identifier (CID).

        Raises:
            CloudError: If the VM could not be created.
        """

    @abstractmethod
    def set_vm_metadata(self, cid: str, metadata: VMMetadata) -> None:
        """Attach metadata tags to a VM.

        Raises:
            CloudError: With kind NOT_IMPLEMENTED when the provider does not
                support tagging, or another kind on failure.
        """

    @abstractmethod
    def find_vm(self, cid: str) -> NetworkIdentity:
        """Look up the live VM and return its hostname and private IP.

        Raises:
            CloudError: If the VM cannot be described.
        """
