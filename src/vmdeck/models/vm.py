"""Value models exchanged with the cloud during VM provisioning."""

from pydantic import BaseModel, ConfigDict, Field


class VMMetadata(BaseModel):
    """Tags attached to a newly created VM."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    deployment: str = Field(..., description="Deployment name")
    job: str = Field(..., description="Job running on the VM")
    index: str = Field(default="0", description="Job instance index")
    director: str = Field(default="vmdeck", description="Managing director name")

    def __str__(self) -> str:
        return (
            f"deployment={self.deployment} job={self.job} "
            f"index={self.index} director={self.director}"
        )


class NetworkIdentity(BaseModel):
    """Realized network identity of a running VM.

    Both values are rendered into a hosts file line, so whitespace and line
    breaks are rejected.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    hostname: str = Field(
        ...,
        pattern=r"^[A-Za-z0-9][A-Za-z0-9.-]*$",
        description="Fully qualified hostname",
    )
    private_ip: str = Field(
        ...,
        pattern=r"^[0-9A-Fa-f.:]+$",
        description="Private IPv4 or IPv6 address",
    )
