"""Cloud providers used to create VMs."""

from __future__ import annotations

from vmdeck.deploy.cloud.base import BaseCloud
from vmdeck.lib.errors import ConfigError
from vmdeck.models.config import DeckConfig


def create_cloud(config: DeckConfig) -> BaseCloud:
    """Create a cloud client from resolved runtime settings."""
    if not config.cpi_command:
        raise ConfigError(
            field="cpi_command",
            message=(
                "No CPI executable configured. "
                "Pass --cpi or set VMDECK_CPI_COMMAND."
            ),
        )

    from vmdeck.deploy.cloud.cpi import CPICloud

    return CPICloud(config.cpi_command, context={"director": config.director_name})


__all__ = ["BaseCloud", "create_cloud"]
