"""Runtime settings for vmdeck commands."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class DeckConfig(BaseModel):
    """Resolved runtime settings.

    Attributes:
        state_file: Path of the deployment state JSON file
        cpi_command: Executable implementing the cloud provider interface
        hosts_file: Hosts file rewritten after VM creation; None disables it
        director_name: Director name tagged onto created VMs
    """

    model_config = ConfigDict(extra="forbid")

    state_file: Path = Field(..., description="Deployment state file")
    cpi_command: str | None = Field(default=None, description="CPI executable")
    hosts_file: Path | None = Field(
        default=None, description="Hosts file updated after creation"
    )
    director_name: str = Field(default="vmdeck", description="Director name")
