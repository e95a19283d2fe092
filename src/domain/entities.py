from datetime import UTC, datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, field_validator

# --- Enums / Literals ---
DefaultVisibility = Literal["PRIVATE", "PUBLIC"]
Provenance = Literal["full", "reduced"]

# seed_version sentinel for "claim in progress"
SEED_CLAIMED = -1


class PlanTier(str, Enum):
    FREE = "FREE"
    PRO = "PRO"
    DEMO = "DEMO"


# --- Profile ---

class Profile(BaseModel):
    id: str
    owner: str
    tier: PlanTier = PlanTier.FREE
    seed_version: int = 0
    seeded_at: datetime | None = None

    # Non-empty for rows created by the bootstrapper; legacy rows may lack them.
    email: str | None = None
    display_name: str | None = None

    default_visibility: DefaultVisibility = "PRIVATE"
    onboarding_version: int = 0
    settings_version: int = 0
    avatar_url: str | None = None
    preferred_name: str | None = None
    bio: str | None = None
    timezone: str | None = None
    locale: str | None = None
    last_seen_at: datetime | None = None
    last_device_id: str | None = None
    accepted_terms_at: datetime | None = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("seed_version")
    @classmethod
    def _check_seed_version(cls, v: int) -> int:
        if v < SEED_CLAIMED:
            raise ValueError(f"seed_version must be -1 or >= 0, got {v}")
        return v


# --- Identity ---

class Identity(BaseModel):
    id: str  # subject id
    username: str | None = None


class IdentityAttributes(BaseModel):
    email: str | None = None
    name: str | None = None
    preferred_username: str | None = None
    role: str | None = None


class SessionClaims(BaseModel):
    groups: set[str] = Field(default_factory=set)
    role: str = ""
