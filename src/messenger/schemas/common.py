"""Shared types for engine inputs."""
from __future__ import annotations

import enum


class Confirmation(str, enum.Enum):
    """Answer to a yes/no prompt collected by the presentation layer."""

    YES = "yes"
    NO = "no"

    @property
    def confirmed(self) -> bool:
        """Return True for an affirmative answer."""
        return self is Confirmation.YES
