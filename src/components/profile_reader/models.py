"""Profile reader data models."""

from __future__ import annotations

from dataclasses import dataclass, field

from src.domain.entities import Profile, Provenance

FULL: Provenance = "full"
REDUCED: Provenance = "reduced"


@dataclass(frozen=True)
class ProfileResult:
    """A single read, tagged with the projection that produced it."""

    profile: Profile | None
    provenance: Provenance = FULL


@dataclass(frozen=True)
class ProfileListResult:
    """One page (or the whole listing) tagged with its provenance."""

    items: list[Profile] = field(default_factory=list)
    cursor: str | None = None
    provenance: Provenance = FULL

    @property
    def reduced(self) -> bool:
        return self.provenance == REDUCED
