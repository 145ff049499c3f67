"""VM provisioning coordinator.

Creating a VM is a sequence of fallible cloud calls. The one ordering rule
that matters is that the VM's CID and agent ID are written to the
deployment state immediately after the cloud reports the VM as created, and
before any other fallible step, so a failure later in the sequence can
never leave a VM that nothing knows about.

No step is retried and nothing is deleted on failure.
"""

from __future__ import annotations

import logging

from vmdeck.deploy.cloud.base import BaseCloud
from vmdeck.deploy.ids import IDGenerator
from vmdeck.deploy.name_resolution import NameResolver
from vmdeck.deploy.vm.vm import VM
from vmdeck.deploy.vm_repo import VMRepo
from vmdeck.lib.errors import (
    CloudError,
    CloudErrorKind,
    ConfigError,
    DeploymentError,
    ResolutionError,
    StateIOError,
)
from vmdeck.models.deployment import DeploymentManifest, ResourcePool
from vmdeck.models.stemcell import CloudStemcell
from vmdeck.models.vm import NetworkIdentity, VMMetadata

logger = logging.getLogger(__name__)


class VMManager:
    """Find the current VM and create new ones.

    Attributes:
        director_name: Director name tagged onto created VMs
    """

    def __init__(
        self,
        vm_repo: VMRepo,
        cloud: BaseCloud,
        id_generator: IDGenerator,
        name_resolver: NameResolver | None = None,
        director_name: str = "vmdeck",
    ) -> None:
        """Initialize the VM manager.

        Args:
            vm_repo: Current VM record
            cloud: Cloud provider client
            id_generator: Source of agent identifiers
            name_resolver: Local name resolution sink; None skips the network
                identity lookup entirely
            director_name: Director name tagged onto created VMs
        """
        self._vm_repo = vm_repo
        self._cloud = cloud
        self._id_generator = id_generator
        self._name_resolver = name_resolver
        self.director_name = director_name

    def find_current(self) -> VM | None:
        """Return a handle for the recorded VM, or None if none is recorded.

        Raises:
            DeploymentError: If the deployment state cannot be read.
        """
        try:
            cid = self._vm_repo.find_current()
        except StateIOError as exc:
            raise DeploymentError(
                operation="find_vm",
                message=f"Finding currently deployed vm: {exc.message}",
            ) from exc

        if cid is None:
            return None
        return self._new_vm(cid)

    def create(self, stemcell: CloudStemcell, manifest: DeploymentManifest) -> VM:
        """Create a VM for the manifest's job from a stemcell.

        Args:
            stemcell: Base image to boot
            manifest: Deployment manifest describing the job

        Returns:
            Handle for the new VM, which is also recorded as current

        Raises:
            ConfigError: If the manifest cannot supply networks or resources.
            DeploymentError: If any cloud, persistence or resolution step fails.
        """
        job_name = manifest.job_name()
        try:
            network_interfaces = manifest.network_interfaces(job_name)
        except ConfigError as exc:
            raise ConfigError(
                exc.field, f"Getting network spec: {exc.message}"
            ) from exc
        logger.debug("Creating VM with network interfaces: %r", network_interfaces)

        try:
            resource_pool = manifest.resource_pool(job_name)
        except ConfigError as exc:
            raise ConfigError(
                exc.field,
                f"Getting resource pool for job '{job_name}': {exc.message}",
            ) from exc

        try:
            agent_id = self._id_generator.generate()
        except Exception as exc:
            raise DeploymentError(
                operation="create_vm", message=f"Generating agent ID: {exc}"
            ) from exc

        cid = self._create_and_record_vm(
            agent_id, stemcell, resource_pool, network_interfaces
        )

        metadata = VMMetadata(
            deployment=manifest.name,
            job=job_name,
            index="0",
            director=self.director_name,
        )
        self._set_metadata(cid, metadata)

        if self._name_resolver is not None:
            identity = self._resolve_network_identity(cid)
            self._name_resolver.update(identity)

        return self._new_vm(cid)

    def _create_and_record_vm(
        self,
        agent_id: str,
        stemcell: CloudStemcell,
        resource_pool: ResourcePool,
        network_interfaces: dict[str, dict[str, object]],
    ) -> str:
        try:
            cid = self._cloud.create_vm(
                agent_id,
                stemcell.cid,
                resource_pool.cloud_properties,
                network_interfaces,
                resource_pool.env,
            )
        except CloudError as exc:
            raise DeploymentError(
                operation="create_vm",
                message=(
                    f"Creating vm with stemcell cid '{stemcell.cid}': {exc.message}"
                ),
            ) from exc

        # Record vm info immediately so the VM is never leaked
        try:
            self._vm_repo.record_current(cid, agent_id)
        except StateIOError as exc:
            logger.error(
                "VM '%s' (agent '%s') was created but could not be recorded; "
                "it must be cleaned up manually",
                cid,
                agent_id,
            )
            raise DeploymentError(
                operation="create_vm",
                message=f"Updating current vm record: {exc.message}",
            ) from exc

        logger.info("Recorded vm '%s' with agent id '%s'", cid, agent_id)
        return cid

    def _set_metadata(self, cid: str, metadata: VMMetadata) -> None:
        try:
            self._cloud.set_vm_metadata(cid, metadata)
        except CloudError as exc:
            if exc.kind == CloudErrorKind.NOT_IMPLEMENTED:
                logger.debug("Cloud does not support VM metadata; skipping tagging")
                return
            raise DeploymentError(
                operation="create_vm",
                message=f"Setting VM metadata to {metadata}: {exc.message}",
            ) from exc

    def _resolve_network_identity(self, cid: str) -> NetworkIdentity:
        try:
            return self._cloud.find_vm(cid)
        except CloudError as exc:
            raise ResolutionError(
                f"Fetching details of vm '{cid}': {exc.message}"
            ) from exc

    def _new_vm(self, cid: str) -> VM:
        return VM(cid, self._vm_repo, self._cloud)
