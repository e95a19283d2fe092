"""Profile component implementation.

Ensures exactly one profile exists per identity. Existing profiles get their
tier reconciled and legacy gaps (email, display_name) repaired with
conditional writes that only fill a field that is absent, null or empty.
"""

from __future__ import annotations

import logging

from src.core.errors import (
    MissingRequiredAttributeError,
    is_condition_failure,
    is_email_nullability_violation,
)
from src.core.ports.identity import NotAuthenticatedError
from src.core.ports.store import (
    AlreadyExistsError,
    Projection,
    missing_or_blank,
    not_equals,
)
from src.domain.entities import Identity, IdentityAttributes, PlanTier, Profile

from ._impl import build_default_profile, pick_display_name, resolve_desired_tier
from .models import (
    DEFAULT_IDENTITY_CONFIG,
    EnsureProfileInput,
    EnsureProfileOutput,
    IdentityConfig,
    SelfHealStatus,
)
from .ports import ProfileStorePort, SessionClaimsPort, TimePort

logger = logging.getLogger(__name__)

HEALABLE_FIELDS = ("email", "display_name")


def _read_profile(store: ProfileStorePort, profile_id: str) -> Profile | None:
    """Read a profile, tolerating legacy rows whose email is null."""
    try:
        return store.get(profile_id)
    except Exception as e:
        if not is_email_nullability_violation(e):
            raise
        logger.info("Profile %s has a null email; reading reduced projection", profile_id)
        return store.get(profile_id, Projection.REDUCED)


def run_self_heal(
    store: ProfileStorePort,
    profile_id: str,
    field_name: str,
    candidate: str | None,
) -> SelfHealStatus:
    """Fill `field_name` with `candidate` only if the stored value is missing or blank.

    Never raises except NotAuthenticatedError.
    """
    value = candidate.strip() if isinstance(candidate, str) else ""
    if not value:
        return SelfHealStatus.SKIPPED

    try:
        store.update(profile_id, {field_name: value}, condition=missing_or_blank(field_name))
    except NotAuthenticatedError:
        raise
    except Exception as e:
        if is_condition_failure(e):
            return SelfHealStatus.ALREADY_SET
        logger.warning("Self-heal of %s for %s failed: %s", field_name, profile_id, e)
        return SelfHealStatus.FAILED

    logger.info("Self-healed %s for %s", field_name, profile_id)
    return SelfHealStatus.HEALED


def _reconcile_tier(
    store: ProfileStorePort,
    profile: Profile,
    desired: PlanTier,
) -> bool:
    """Best-effort tier update. PRO is left alone, here and at write time."""
    if profile.tier is PlanTier.PRO or profile.tier is desired:
        return False
    try:
        store.update(
            profile.id,
            {"tier": desired},
            condition=not_equals("tier", PlanTier.PRO),
        )
    except NotAuthenticatedError:
        raise
    except Exception as e:
        logger.warning(
            "Tier update %s -> %s for %s failed: %s",
            profile.tier.value,
            desired.value,
            profile.id,
            e,
        )
        return False
    return True


def _heal_candidates(identity: Identity, attributes: IdentityAttributes) -> dict[str, str]:
    return {
        "email": (attributes.email or "").strip(),
        "display_name": pick_display_name(identity, attributes),
    }


def run_ensure_profile(
    profile_input: EnsureProfileInput,
    store: ProfileStorePort,
    time: TimePort,
    claims_source: SessionClaimsPort | None = None,
    config: IdentityConfig = DEFAULT_IDENTITY_CONFIG,
) -> EnsureProfileOutput:
    """Return the identity's profile, creating it on first bootstrap.

    Args:
        profile_input: Identity and attribute bag for the caller.
        store: Profile store.
        time: Time provider for created_at/updated_at.
        claims_source: Session claims source for tier resolution.
        config: Demo/admin detection settings.

    Returns:
        EnsureProfileOutput carrying the profile as read or created.

    Raises:
        MissingRequiredAttributeError: no profile yet and no email to create one.
        NotAuthenticatedError: propagated from the claims source.
    """
    identity = profile_input.identity
    attributes = profile_input.attributes

    existing = _read_profile(store, identity.id)
    if existing is not None:
        desired = resolve_desired_tier(identity, claims_source, config)
        tier_updated = _reconcile_tier(store, existing, desired)

        outcomes = {
            name: run_self_heal(store, identity.id, name, candidate)
            for name, candidate in _heal_candidates(identity, attributes).items()
        }
        return EnsureProfileOutput(
            profile=existing,
            tier_updated=tier_updated,
            self_heal=outcomes,
        )

    email = (attributes.email or "").strip()
    if not email:
        raise MissingRequiredAttributeError("email")

    tier = resolve_desired_tier(identity, claims_source, config)
    profile = build_default_profile(identity, attributes, tier, time.now_utc())

    try:
        created = store.create(profile)
    except AlreadyExistsError:
        # Lost a concurrent first-bootstrap race.
        winner = _read_profile(store, identity.id)
        if winner is None:
            raise
        logger.info("Profile %s created concurrently; using existing record", identity.id)
        return EnsureProfileOutput(profile=winner)

    logger.info("Created profile %s (tier=%s)", created.id, created.tier.value)
    return EnsureProfileOutput(profile=created, created=True)


class ProfileBootstrapper:
    """Stateful wrapper binding the store, clock and identity config."""

    def __init__(
        self,
        store: ProfileStorePort,
        time: TimePort,
        claims_source: SessionClaimsPort | None = None,
        config: IdentityConfig = DEFAULT_IDENTITY_CONFIG,
    ):
        self.store = store
        self.time = time
        self.claims_source = claims_source
        self.config = config

    def ensure_profile(
        self,
        identity: Identity,
        attributes: IdentityAttributes | None = None,
    ) -> EnsureProfileOutput:
        return run_ensure_profile(
            EnsureProfileInput(identity=identity, attributes=attributes or IdentityAttributes()),
            self.store,
            self.time,
            self.claims_source,
            self.config,
        )

    def self_heal(self, profile_id: str, field_name: str, candidate: str | None) -> SelfHealStatus:
        if field_name not in HEALABLE_FIELDS:
            raise ValueError(f"Field is not self-healable: {field_name}")
        return run_self_heal(self.store, profile_id, field_name, candidate)


def run(
    profile_input: EnsureProfileInput,
    store: ProfileStorePort,
    time: TimePort,
    claims_source: SessionClaimsPort | None = None,
    config: IdentityConfig = DEFAULT_IDENTITY_CONFIG,
) -> EnsureProfileOutput:
    """Main entry point for the profile component."""
    return run_ensure_profile(profile_input, store, time, claims_source, config)
