"""
Profile component data models.

Frozen dataclasses for inputs, outputs and configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from src.domain.entities import Identity, IdentityAttributes, Profile

DEMO_USERNAME_PATTERN = (
    r"^demo\+[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}@"
)


@dataclass(frozen=True)
class IdentityConfig:
    """How identities map onto plan tiers and admin rights."""

    demo_username_pattern: str = DEMO_USERNAME_PATTERN
    demo_group: str = "Demo"
    demo_role: str = "Demo"
    admin_group: str = "Admin"
    admin_role: str = "Admin"


DEFAULT_IDENTITY_CONFIG = IdentityConfig()


class SelfHealStatus(Enum):
    """Outcome of one self-heal attempt."""

    SKIPPED = "skipped"  # no candidate value
    HEALED = "healed"
    ALREADY_SET = "already_set"  # guard condition failed
    FAILED = "failed"


@dataclass(frozen=True)
class EnsureProfileInput:
    """Identity the profile must exist for."""

    identity: Identity
    attributes: IdentityAttributes = field(default_factory=IdentityAttributes)


@dataclass(frozen=True)
class EnsureProfileOutput:
    """Result of ensure_profile."""

    profile: Profile
    created: bool = False
    tier_updated: bool = False
    self_heal: dict[str, SelfHealStatus] = field(default_factory=dict)

    @property
    def healed_fields(self) -> tuple[str, ...]:
        return tuple(k for k, v in self.self_heal.items() if v is SelfHealStatus.HEALED)
