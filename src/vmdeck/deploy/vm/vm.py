"""Handle for a VM created or found by the VM manager."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vmdeck.deploy.cloud.base import BaseCloud
    from vmdeck.deploy.vm_repo import VMRepo


class VM:
    """A VM bound to its cloud identifier.

    The handle references the VM repo but does not own it; agent
    communication and disk attachment build on top of this handle.
    """

    def __init__(self, cid: str, vm_repo: VMRepo, cloud: BaseCloud) -> None:
        self._cid = cid
        self._vm_repo = vm_repo
        self._cloud = cloud

    @property
    def cid(self) -> str:
        return self._cid

    @property
    def cloud(self) -> BaseCloud:
        return self._cloud

    def is_current(self) -> bool:
        """Return True if this VM is the one recorded as current."""
        return self._vm_repo.find_current() == self._cid

    def agent_id(self) -> str | None:
        """Return the recorded agent ID if this VM is the current one."""
        if not self.is_current():
            return None
        return self._vm_repo.find_current_agent_id()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VM):
            return NotImplemented
        return self._cid == other._cid

    def __hash__(self) -> int:
        return hash(self._cid)

    def __repr__(self) -> str:
        return f"VM(cid={self._cid!r})"
