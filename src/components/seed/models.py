"""
Seed component data models.

seed_version doubles as the claim record: -1 means a context is generating
seed content right now, N >= 0 means seeded up to version N.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from src.domain.entities import SEED_CLAIMED, Identity, Profile

CURRENT_SEED_VERSION = 1


class SeedState(Enum):
    NOT_SEEDED = "not_seeded"
    CLAIMED = "claimed"
    SEEDED = "seeded"


class SeedOutcome(Enum):
    ALREADY_SEEDED = "already_seeded"
    CLAIM_LOST = "claim_lost"
    SEEDED = "seeded"


def seed_state(seed_version: int, current_version: int = CURRENT_SEED_VERSION) -> SeedState:
    """Classify a stored seed_version against the current seed version."""
    if seed_version == SEED_CLAIMED:
        return SeedState.CLAIMED
    if seed_version >= current_version:
        return SeedState.SEEDED
    return SeedState.NOT_SEEDED


@dataclass(frozen=True)
class SeedInput:
    profile: Profile
    identity: Identity
    current_version: int = CURRENT_SEED_VERSION


@dataclass(frozen=True)
class SeedOutput:
    """Result of a seed attempt. Only the claim winner reports did_seed_demo."""

    outcome: SeedOutcome
    profile: Profile | None = None

    @property
    def did_seed_demo(self) -> bool:
        return self.outcome is SeedOutcome.SEEDED

    @classmethod
    def already_seeded(cls, profile: Profile) -> SeedOutput:
        return cls(outcome=SeedOutcome.ALREADY_SEEDED, profile=profile)

    @classmethod
    def claim_lost(cls) -> SeedOutput:
        return cls(outcome=SeedOutcome.CLAIM_LOST)

    @classmethod
    def seeded(cls, profile: Profile) -> SeedOutput:
        return cls(outcome=SeedOutcome.SEEDED, profile=profile)
