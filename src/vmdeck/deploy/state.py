"""Deployment state persistence.

The state file is always read and written as a whole snapshot; there is no
field-level write. Concurrent writers are not detected and the last save
wins.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from vmdeck.lib.errors import StateIOError
from vmdeck.models.deployment_state import STATE_VERSION, DeploymentState

STATE_DIR_NAME = ".vmdeck"
STATE_FILE_NAME = "deployment-state.json"


def get_state_path(base_dir: Path) -> Path:
    """Return the deployment state file path for a working directory."""
    return base_dir / STATE_DIR_NAME / STATE_FILE_NAME


def load_state(state_path: Path) -> DeploymentState:
    """Load deployment state data from disk."""
    if not state_path.exists():
        return DeploymentState(version=STATE_VERSION)

    try:
        content = state_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise StateIOError(
            f"Failed to read deployment state at {state_path}: {exc}"
        ) from exc

    if not content.strip():
        return DeploymentState(version=STATE_VERSION)

    try:
        state = DeploymentState.model_validate_json(content)
    except ValidationError as exc:
        raise StateIOError(
            f"Invalid deployment state format in {state_path}: {exc}"
        ) from exc

    if not state.version:
        state = state.model_copy(update={"version": STATE_VERSION})
    return state


def save_state(state_path: Path, state: DeploymentState) -> None:
    """Persist deployment state data to disk, replacing the previous snapshot."""
    payload = json.dumps(state.model_dump(mode="json"), indent=2, sort_keys=True)
    tmp_name: str | None = None
    try:
        state_path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=state_path.parent,
            prefix=f".{state_path.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            tmp_name = handle.name
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, state_path)
        tmp_name = None
    except OSError as exc:
        raise StateIOError(
            f"Failed to write deployment state to {state_path}: {exc}"
        ) from exc
    finally:
        if tmp_name is not None:
            Path(tmp_name).unlink(missing_ok=True)


class DeploymentStateService:
    """Whole-snapshot load/save bound to one state file."""

    def __init__(self, state_path: Path) -> None:
        self._path = state_path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> DeploymentState:
        return load_state(self._path)

    def save(self, state: DeploymentState) -> None:
        save_state(self._path, state)
