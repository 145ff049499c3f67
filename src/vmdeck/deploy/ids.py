"""Agent identifier generation."""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod


class IDGenerator(ABC):
    """Source of unique identifiers."""

    @abstractmethod
    def generate(self) -> str:
        """Return a new identifier, unique per call."""


class UUIDGenerator(IDGenerator):
    """Generate random UUID4 identifiers."""

    def generate(self) -> str:
        return str(uuid.uuid4())
