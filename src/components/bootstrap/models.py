"""Bootstrap component data models.

Frozen dataclasses for inputs, outputs, and configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from src.components.profile.models import DEFAULT_IDENTITY_CONFIG, IdentityConfig
from src.components.seed.models import CURRENT_SEED_VERSION, SeedOutcome

if TYPE_CHECKING:
    from src.domain.entities import Profile


@dataclass(frozen=True)
class BootstrapInput:
    """Input parameters for bootstrap operation."""

    want_seed: bool = False


@dataclass(frozen=True)
class BootstrapConfig:
    """Seed version and identity rules in effect."""

    current_seed_version: int = CURRENT_SEED_VERSION
    identity: IdentityConfig = DEFAULT_IDENTITY_CONFIG


DEFAULT_BOOTSTRAP_CONFIG = BootstrapConfig()


@dataclass(frozen=True)
class BootstrapOutput:
    """Result of bootstrap operation."""

    profile_id: str
    did_seed_demo: bool
    created: bool
    profile: Profile | None = None
    seed_outcome: SeedOutcome | None = None
    healed_fields: tuple[str, ...] = ()

    @classmethod
    def profile_only(
        cls,
        profile: Profile,
        created: bool,
        healed_fields: tuple[str, ...] = (),
    ) -> BootstrapOutput:
        """Result when seeding was not requested."""
        return cls(
            profile_id=profile.id,
            did_seed_demo=False,
            created=created,
            profile=profile,
            healed_fields=healed_fields,
        )

    @classmethod
    def with_seed(
        cls,
        profile: Profile,
        created: bool,
        outcome: SeedOutcome,
        did_seed_demo: bool,
        healed_fields: tuple[str, ...] = (),
    ) -> BootstrapOutput:
        """Result after a seed attempt."""
        return cls(
            profile_id=profile.id,
            did_seed_demo=did_seed_demo,
            created=created,
            profile=profile,
            seed_outcome=outcome,
            healed_fields=healed_fields,
        )


@dataclass(frozen=True)
class ResetSeedOutput:
    """Result of resetting the seed gate and bootstrapping again with a seed."""

    reset: bool
    bootstrap: BootstrapOutput

    @property
    def did_seed_demo(self) -> bool:
        return self.bootstrap.did_seed_demo
