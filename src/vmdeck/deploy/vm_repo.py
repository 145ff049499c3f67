"""Current VM record backed by the deployment state file."""

from __future__ import annotations

import logging
from typing import Protocol

from vmdeck.lib.errors import StateIOError
from vmdeck.models.deployment_state import DeploymentState

logger = logging.getLogger(__name__)


class StateStore(Protocol):
    """Whole-snapshot persistence used by the VM repo."""

    def load(self) -> DeploymentState: ...

    def save(self, state: DeploymentState) -> None: ...


class VMRepo:
    """Read and write the current VM CID and agent ID.

    Every operation loads the full snapshot, applies its change and saves the
    full snapshot back. The CID and agent ID are independent fields except
    for ``record_current`` and ``clear_current``, which write both in a single
    save.
    """

    def __init__(self, state_service: StateStore) -> None:
        self._state_service = state_service

    def find_current(self) -> str | None:
        """Return the current VM CID, or None when no VM is recorded."""
        return self._load().current_vm_cid

    def find_current_agent_id(self) -> str | None:
        """Return the current agent ID, or None when no agent is recorded."""
        return self._load().current_agent_id

    def update_current(self, cid: str) -> None:
        """Set the current VM CID, leaving the agent ID untouched."""
        self._save_with(current_vm_cid=cid or None)

    def update_current_agent_id(self, agent_id: str) -> None:
        """Set the current agent ID, leaving the VM CID untouched."""
        self._save_with(current_agent_id=agent_id or None)

    def record_current(self, cid: str, agent_id: str) -> None:
        """Set the current VM CID and agent ID in one save."""
        self._save_with(current_vm_cid=cid or None, current_agent_id=agent_id or None)

    def clear_current(self) -> None:
        """Unset both the current VM CID and agent ID in one save."""
        self._save_with(current_vm_cid=None, current_agent_id=None)

    def _load(self) -> DeploymentState:
        try:
            return self._state_service.load()
        except StateIOError as exc:
            raise StateIOError(f"Loading existing config: {exc.message}") from exc

    def _save_with(self, **changes: str | None) -> None:
        updated = self._load().model_copy(update=changes)
        try:
            self._state_service.save(updated)
        except StateIOError as exc:
            raise StateIOError(f"Saving new config: {exc.message}") from exc
        logger.debug(
            "Saved current vm record: cid=%s agent_id=%s",
            updated.current_vm_cid,
            updated.current_agent_id,
        )
