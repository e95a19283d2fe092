from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from src.domain.entities import PlanTier, Profile

Provenance = Literal["full", "reduced"]


# --- Profiles ---
class ProfileResponse(BaseModel):
    id: str
    owner: str
    tier: PlanTier
    seed_version: int
    seeded_at: datetime | None = None
    email: str | None = None
    display_name: str | None = None
    default_visibility: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_profile(cls, profile: Profile) -> "ProfileResponse":
        return cls.model_validate(profile.model_dump())


class ProfileReadResponse(BaseModel):
    profile: ProfileResponse
    provenance: Provenance


class ProfileListResponse(BaseModel):
    items: list[ProfileResponse]
    cursor: str | None = None
    provenance: Provenance


# --- Bootstrap ---
class BootstrapRequest(BaseModel):
    want_seed: bool = False


class BootstrapResponse(BaseModel):
    profile_id: str
    did_seed_demo: bool
    created: bool
    seed_outcome: str | None = None
    healed_fields: list[str] = []


class ResetSeedResponse(BaseModel):
    reset: bool
    bootstrap: BootstrapResponse


# --- Admin ---
class BackfillResponse(BaseModel):
    updated: int
    skipped: int
    failed: int
    provenance: Provenance


class ProbeFailureModel(BaseModel):
    profile_id: str
    message: str


class ProbeResponse(BaseModel):
    ok: int
    missing: list[str]
    failed: list[ProbeFailureModel]


class ReleaseClaimResponse(BaseModel):
    profile_id: str
    released: bool


class ErrorResponse(BaseModel):
    detail: str
    kind: str
