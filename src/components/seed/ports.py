"""Seed component port definitions."""

from __future__ import annotations

from typing import Protocol

from src.core.ports.store import ProfileStorePort
from src.core.ports.time import TimePort
from src.domain.entities import Identity, Profile


class SeedContentPort(Protocol):
    """The one-time content generation step. Opaque to the coordinator."""

    def generate(self, profile: Profile, identity: Identity) -> None:
        """Generate seed content. Any exception counts as a populate failure."""
        ...


__all__ = ["ProfileStorePort", "SeedContentPort", "TimePort"]
