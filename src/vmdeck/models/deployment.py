"""Pydantic models for the deployment manifest.

This module defines the manifest schema that describes a single-VM
deployment: the networks it attaches to, the resource pools that carry
cloud properties, and the job placed on the VM.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from vmdeck.lib.errors import ConfigError


class NetworkType(str, Enum):
    """Supported network types."""

    MANUAL = "manual"
    DYNAMIC = "dynamic"
    VIP = "vip"


class Network(BaseModel):
    """Network definition.

    Attributes:
        name: Network name referenced by jobs and resource pools
        type: Network type (manual, dynamic, vip)
        netmask: Subnet mask for manual networks
        gateway: Gateway address for manual networks
        dns: DNS servers handed to the VM
        cloud_properties: Provider-specific network properties
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., description="Network name")
    type: NetworkType = Field(default=NetworkType.MANUAL, description="Network type")
    netmask: str | None = Field(default=None, description="Subnet mask")
    gateway: str | None = Field(default=None, description="Gateway address")
    dns: list[str] = Field(default_factory=list, description="DNS servers")
    cloud_properties: dict[str, Any] = Field(
        default_factory=dict, description="Provider-specific network properties"
    )


class ResourcePool(BaseModel):
    """Resource pool supplying cloud properties and agent env for the VM."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., description="Resource pool name")
    network: str | None = Field(default=None, description="Default network name")
    cloud_properties: dict[str, Any] = Field(
        default_factory=dict, description="Provider-specific VM properties"
    )
    env: dict[str, Any] = Field(
        default_factory=dict, description="Environment passed to the agent"
    )


class JobNetwork(BaseModel):
    """A job's attachment to a network."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., description="Network name")
    static_ips: list[str] = Field(default_factory=list, description="Static IPs")
    default: list[str] = Field(
        default_factory=list, description="Defaults (dns, gateway) from this network"
    )


class Job(BaseModel):
    """Job placed on the deployed VM."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., description="Job name")
    instances: int = Field(default=1, ge=0, le=1, description="Instance count")
    resource_pool: str = Field(..., description="Resource pool name")
    networks: list[JobNetwork] = Field(
        default_factory=list, description="Network attachments"
    )


class DeploymentManifest(BaseModel):
    """Single-VM deployment manifest."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, description="Deployment name")
    networks: list[Network] = Field(default_factory=list, description="Networks")
    resource_pools: list[ResourcePool] = Field(
        default_factory=list, description="Resource pools"
    )
    jobs: list[Job] = Field(default_factory=list, description="Jobs")

    @model_validator(mode="after")
    def validate_unique_names(self) -> DeploymentManifest:
        """Validate that networks, resource pools and jobs have unique names."""
        for section, items in (
            ("networks", self.networks),
            ("resource_pools", self.resource_pools),
            ("jobs", self.jobs),
        ):
            names = [item.name for item in items]
            duplicates = sorted({n for n in names if names.count(n) > 1})
            if duplicates:
                raise ValueError(
                    f"Duplicate names in {section}: {', '.join(duplicates)}"
                )
        return self

    def job_name(self) -> str:
        """Return the name of the job deployed on the VM."""
        if not self.jobs:
            raise ConfigError("jobs", "Manifest does not define any jobs")
        return self.jobs[0].name

    def _find_job(self, job_name: str) -> Job:
        for job in self.jobs:
            if job.name == job_name:
                return job
        raise ConfigError("jobs", f"Could not find job '{job_name}'")

    def _find_network(self, network_name: str) -> Network:
        for network in self.networks:
            if network.name == network_name:
                return network
        raise ConfigError("networks", f"Could not find network '{network_name}'")

    def network_interfaces(self, job_name: str) -> dict[str, dict[str, Any]]:
        """Build the per-network interface settings for a job.

        Args:
            job_name: Job whose network attachments are resolved

        Returns:
            Mapping of network name to interface settings as passed to the cloud

        Raises:
            ConfigError: If the job or one of its networks is not defined
        """
        job = self._find_job(job_name)
        interfaces: dict[str, dict[str, Any]] = {}
        for job_network in job.networks:
            network = self._find_network(job_network.name)
            interface: dict[str, Any] = {
                "type": network.type.value,
                "cloud_properties": dict(network.cloud_properties),
            }
            if job_network.static_ips:
                interface["ip"] = job_network.static_ips[0]
            if network.type == NetworkType.MANUAL:
                if network.netmask:
                    interface["netmask"] = network.netmask
                if network.gateway:
                    interface["gateway"] = network.gateway
            if network.dns:
                interface["dns"] = list(network.dns)
            if job_network.default:
                interface["default"] = list(job_network.default)
            interfaces[network.name] = interface
        return interfaces

    def resource_pool(self, job_name: str) -> ResourcePool:
        """Return the resource pool a job is placed in.

        Raises:
            ConfigError: If the job or its resource pool is not defined
        """
        job = self._find_job(job_name)
        for pool in self.resource_pools:
            if pool.name == job.resource_pool:
                return pool
        raise ConfigError(
            "resource_pools", f"Could not find resource pool '{job.resource_pool}'"
        )
