"""
Pure helpers for profile bootstrapping.

No I/O except the best-effort claims read in resolve_desired_tier.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from functools import lru_cache

from src.core.ports.identity import NotAuthenticatedError
from src.domain.entities import (
    Identity,
    IdentityAttributes,
    PlanTier,
    Profile,
    SessionClaims,
)

from .models import DEFAULT_IDENTITY_CONFIG, IdentityConfig
from .ports import SessionClaimsPort

logger = logging.getLogger(__name__)


@lru_cache(maxsize=16)
def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


def _clean(value: str | None) -> str:
    return value.strip() if isinstance(value, str) else ""


def is_demo_identity_username(
    username: str | None,
    config: IdentityConfig = DEFAULT_IDENTITY_CONFIG,
) -> bool:
    """True for usernames shaped like demo+<uuid>@domain."""
    name = _clean(username)
    if not name:
        return False
    return _compile(config.demo_username_pattern).search(name) is not None


def claims_indicate_demo(
    claims: SessionClaims,
    config: IdentityConfig = DEFAULT_IDENTITY_CONFIG,
) -> bool:
    return config.demo_group in claims.groups or claims.role == config.demo_role


def resolve_desired_tier(
    identity: Identity,
    claims_source: SessionClaimsPort | None = None,
    config: IdentityConfig = DEFAULT_IDENTITY_CONFIG,
) -> PlanTier:
    """
    Compute the tier this identity should hold.

    The username shape wins over session claims. Failure to read claims
    falls through to FREE, except NotAuthenticatedError which propagates.
    Never returns PRO; PRO is granted by billing, not by identity.
    """
    if is_demo_identity_username(identity.username, config):
        return PlanTier.DEMO

    if claims_source is not None:
        try:
            claims = claims_source.current_session_claims()
        except NotAuthenticatedError:
            raise
        except Exception as e:
            logger.warning("Could not read session claims for %s: %s", identity.id, e)
        else:
            if claims_indicate_demo(claims, config):
                return PlanTier.DEMO

    return PlanTier.FREE


def pick_display_name(identity: Identity, attributes: IdentityAttributes) -> str:
    """
    First non-empty of: username, preferred username, full name, email local part.

    Returns "" when nothing usable is present.
    """
    for candidate in (identity.username, attributes.preferred_username, attributes.name):
        value = _clean(candidate)
        if value:
            return value

    email = _clean(attributes.email)
    if "@" in email:
        local = email.split("@", 1)[0].strip()
        if local:
            return local
    return ""


def build_default_profile(
    identity: Identity,
    attributes: IdentityAttributes,
    tier: PlanTier,
    now: datetime,
) -> Profile:
    """Full default record for a first bootstrap. Email must already be validated."""
    return Profile(
        id=identity.id,
        owner=identity.id,
        tier=tier,
        seed_version=0,
        seeded_at=None,
        email=_clean(attributes.email),
        display_name=pick_display_name(identity, attributes),
        created_at=now,
        updated_at=now,
    )
