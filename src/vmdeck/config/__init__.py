"""Configuration loading and validation for vmdeck.

Main components:
- ConfigLoader: Load deployment manifests and resolve runtime settings
- Environment variable substitution (${VAR_NAME} pattern)
"""

from vmdeck.config.env_loader import substitute_env_vars
from vmdeck.config.loader import ConfigLoader

__all__ = [
    "ConfigLoader",
    "substitute_env_vars",
]
