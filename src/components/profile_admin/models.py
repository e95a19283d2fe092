"""Profile admin data models."""

from __future__ import annotations

from dataclasses import dataclass, field

from src.domain.entities import Provenance

DEFAULT_PLACEHOLDER_DOMAIN = "placeholder.local"


@dataclass(frozen=True)
class BackfillOutput:
    """Counts from one backfill pass."""

    updated: int = 0
    skipped: int = 0
    failed: int = 0
    provenance: Provenance = "full"

    @property
    def total(self) -> int:
        return self.updated + self.skipped + self.failed


@dataclass(frozen=True)
class ProbeFailure:
    profile_id: str
    message: str


@dataclass(frozen=True)
class ProbeOutput:
    """Per-profile email health from a probe pass."""

    ok: int = 0
    missing: tuple[str, ...] = ()
    failed: tuple[ProbeFailure, ...] = field(default_factory=tuple)

    @property
    def checked(self) -> int:
        return self.ok + len(self.missing) + len(self.failed)
