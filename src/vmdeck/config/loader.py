"""Configuration loader for vmdeck.

Loads deployment manifests from YAML and resolves runtime settings from
command-line values, environment variables and defaults.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from vmdeck.config.env_loader import substitute_env_vars
from vmdeck.config.validator import flatten_pydantic_errors
from vmdeck.deploy.state import get_state_path
from vmdeck.lib.errors import ConfigError, FileNotFoundError
from vmdeck.models.config import DeckConfig
from vmdeck.models.deployment import DeploymentManifest

logger = logging.getLogger(__name__)

# Environment variable to field name mapping
ENV_VAR_MAP = {
    "state_file": "VMDECK_STATE_FILE",
    "cpi_command": "VMDECK_CPI_COMMAND",
    "hosts_file": "VMDECK_HOSTS_FILE",
    "director_name": "VMDECK_DIRECTOR_NAME",
}


class ConfigLoader:
    """Load manifests and resolve runtime settings."""

    def parse_yaml(self, file_path: str) -> dict[str, Any]:
        """Parse a YAML file with environment variable substitution.

        Args:
            file_path: Path to the YAML file to parse

        Returns:
            Parsed content, or an empty dict for an empty file

        Raises:
            FileNotFoundError: If the file cannot be read
            ConfigError: If YAML parsing fails or the root is not a mapping
        """
        path = Path(file_path)
        try:
            raw_text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise FileNotFoundError(
                file_path,
                f"Manifest not found at {file_path}. "
                f"Please ensure the file exists at this path.",
            ) from e

        try:
            content = yaml.safe_load(substitute_env_vars(raw_text))
        except yaml.YAMLError as e:
            raise ConfigError(
                "yaml_parse",
                f"Failed to parse YAML file {file_path}: {str(e)}",
            ) from e

        if content is None:
            return {}
        if not isinstance(content, dict):
            raise ConfigError(
                "yaml_parse", f"Expected a mapping at the top of {file_path}"
            )
        return content

    def load_manifest(self, file_path: str) -> DeploymentManifest:
        """Load and validate a deployment manifest.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ConfigError: If parsing or validation fails
        """
        content = self.parse_yaml(file_path)
        try:
            manifest = DeploymentManifest(**content)
        except PydanticValidationError as e:
            error_text = "\n".join(flatten_pydantic_errors(e))
            raise ConfigError(
                "manifest_validation",
                f"Invalid deployment manifest in {file_path}:\n{error_text}",
            ) from e
        logger.debug("Loaded manifest for deployment '%s'", manifest.name)
        return manifest

    def resolve_deck_config(
        self,
        overrides: Mapping[str, Any] | None = None,
        base_dir: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> DeckConfig:
        """Resolve runtime settings.

        Precedence (highest to lowest):
        1. Explicit values (CLI options); None means "not given"
        2. Environment variables (VMDECK_*)
        3. Defaults (state file under ``base_dir/.vmdeck``)

        Raises:
            ConfigError: If the resolved settings are invalid
        """
        env_vars = os.environ if env is None else env
        given = {k: v for k, v in (overrides or {}).items() if v is not None}

        values: dict[str, Any] = {}
        for field_name, env_var_name in ENV_VAR_MAP.items():
            if field_name in given:
                values[field_name] = given[field_name]
            elif env_vars.get(env_var_name):
                values[field_name] = env_vars[env_var_name]

        if "state_file" not in values:
            values["state_file"] = get_state_path(base_dir or Path.cwd())

        try:
            return DeckConfig(**values)
        except PydanticValidationError as e:
            raise ConfigError(
                "settings", "\n".join(flatten_pydantic_errors(e))
            ) from e
