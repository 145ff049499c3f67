"""Deployment state models for the persisted deployment snapshot."""

from __future__ import annotations

from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

STATE_VERSION = "1.0"


class StemcellRecord(BaseModel):
    """Uploaded stemcell known to the deployment."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., description="Local record identifier")
    name: str = Field(..., description="Stemcell name")
    version: str = Field(..., description="Stemcell version")
    cid: str = Field(..., description="Cloud identifier of the stemcell image")


class DiskRecord(BaseModel):
    """Persistent disk known to the deployment."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., description="Local record identifier")
    cid: str = Field(..., description="Cloud identifier of the disk")
    size: int = Field(..., ge=0, description="Disk size in MB")
    cloud_properties: dict[str, object] = Field(
        default_factory=dict, description="Cloud properties used to create the disk"
    )


class DeploymentState(BaseModel):
    """Top-level deployment state stored on disk.

    Only ``current_vm_cid`` and ``current_agent_id`` are owned by the VM
    lifecycle code; the remaining fields are carried through untouched on
    every load/save cycle.
    """

    model_config = ConfigDict(extra="forbid")

    version: str = Field(default=STATE_VERSION, description="State file version")
    director_id: str = Field(
        default_factory=lambda: str(uuid4()), description="Director identifier"
    )
    installation_id: str = Field(
        default_factory=lambda: str(uuid4()), description="Installation identifier"
    )
    current_vm_cid: str | None = Field(
        default=None, description="Cloud identifier of the current VM"
    )
    current_agent_id: str | None = Field(
        default=None, description="Agent identifier of the current VM"
    )
    current_stemcell_id: str | None = Field(
        default=None, description="Record id of the stemcell in use"
    )
    current_disk_id: str | None = Field(
        default=None, description="Record id of the attached disk"
    )
    current_manifest_sha: str | None = Field(
        default=None, description="Hash of the last deployed manifest"
    )
    stemcells: list[StemcellRecord] = Field(
        default_factory=list, description="Known stemcells"
    )
    disks: list[DiskRecord] = Field(default_factory=list, description="Known disks")

    @field_validator(
        "current_vm_cid",
        "current_agent_id",
        "current_stemcell_id",
        "current_disk_id",
        "current_manifest_sha",
        mode="before",
    )
    @classmethod
    def empty_string_is_unset(cls, v: object) -> object:
        """Normalize empty identifiers written by older state files to None."""
        if v == "":
            return None
        return v
