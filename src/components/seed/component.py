"""Seed claim coordination.

Guarantees seed content is generated at most once per identity per seed
version across any number of concurrent contexts. The only synchronization is
the store's single-record conditional write on seed_version:

    NOT_SEEDED --claim--> CLAIMED --finalize--> SEEDED
                             |
                             +--rollback--> NOT_SEEDED (seed_version = 0)

    SEEDED --reset--> NOT_SEEDED (seed_version = 0, seeded_at = None)

A failed rollback leaves the claim in place; run_release_stale_claim is the
operator's way out.
"""

from __future__ import annotations

import logging

from src.core.errors import is_condition_failure
from src.core.ports.store import all_of, equals, less_than, not_equals
from src.domain.entities import SEED_CLAIMED, Profile

from .models import CURRENT_SEED_VERSION, SeedInput, SeedOutput, SeedState, seed_state
from .ports import ProfileStorePort, SeedContentPort, TimePort

logger = logging.getLogger(__name__)


def run_claim(
    store: ProfileStorePort,
    profile_id: str,
    current_version: int = CURRENT_SEED_VERSION,
) -> Profile | None:
    """Try to take the seed claim.

    Returns the claimed profile, or None when another context holds the claim
    or seeding already happened. Other store errors propagate.
    """
    condition = all_of(
        less_than("seed_version", current_version),
        not_equals("seed_version", SEED_CLAIMED),
    )
    try:
        claimed = store.update(profile_id, {"seed_version": SEED_CLAIMED}, condition=condition)
    except Exception as e:
        if is_condition_failure(e):
            logger.info("Seed claim for %s lost to another context", profile_id)
            return None
        raise
    logger.info("Seed claim taken for %s", profile_id)
    return claimed


def run_finalize(
    store: ProfileStorePort,
    profile_id: str,
    time: TimePort,
    current_version: int = CURRENT_SEED_VERSION,
) -> Profile:
    """Mark seeding complete. Any failure propagates; there is no rollback."""
    profile = store.update(
        profile_id,
        {"seed_version": current_version, "seeded_at": time.now_utc()},
        condition=equals("seed_version", SEED_CLAIMED),
    )
    logger.info("Seed finalized for %s at version %d", profile_id, current_version)
    return profile


def run_rollback(store: ProfileStorePort, profile_id: str) -> bool:
    """Release a held claim back to never-seeded. Failures are logged, not raised."""
    try:
        store.update(
            profile_id,
            {"seed_version": 0},
            condition=equals("seed_version", SEED_CLAIMED),
        )
    except Exception as e:
        logger.warning("Seed rollback for %s failed; claim left in place: %s", profile_id, e)
        return False
    logger.info("Seed claim for %s rolled back", profile_id)
    return True


def run_release_stale_claim(store: ProfileStorePort, profile_id: str) -> bool:
    """Operator action: release a claim abandoned by a crashed or failed context.

    Returns False when the profile is not claimed. Other errors propagate.
    """
    try:
        store.update(
            profile_id,
            {"seed_version": 0},
            condition=equals("seed_version", SEED_CLAIMED),
        )
    except Exception as e:
        if is_condition_failure(e):
            return False
        raise
    logger.warning("Released stale seed claim for %s", profile_id)
    return True


def run_reset_seed(store: ProfileStorePort, profile_id: str) -> bool:
    """Reopen the seed gate (seed_version = 0, seeded_at = None) for a re-seed.

    Refused while a claim is held, so an in-flight populate is never doubled.
    Returns False when refused or the profile does not exist. Other errors
    propagate.
    """
    try:
        store.update(
            profile_id,
            {"seed_version": 0, "seeded_at": None},
            condition=not_equals("seed_version", SEED_CLAIMED),
        )
    except Exception as e:
        if is_condition_failure(e):
            logger.info("Seed reset for %s refused; claim in progress or no profile", profile_id)
            return False
        raise
    logger.info("Seed gate reset for %s", profile_id)
    return True


def run_seed(
    seed_input: SeedInput,
    store: ProfileStorePort,
    content: SeedContentPort,
    time: TimePort,
) -> SeedOutput:
    """Claim, populate and finalize seed content for one profile.

    Args:
        seed_input: The profile as read, the identity and the current version.
        store: Profile store.
        content: Seed content generator.
        time: Time provider for seeded_at.

    Returns:
        SeedOutput; did_seed_demo is True only for the context that finalized.

    Raises:
        Whatever populate raised, after a best-effort rollback (this includes
        cancellation). Finalize failures propagate without rollback.
    """
    profile = seed_input.profile
    current = seed_input.current_version

    if seed_state(profile.seed_version, current) is SeedState.SEEDED:
        return SeedOutput.already_seeded(profile)

    claimed = run_claim(store, profile.id, current)
    if claimed is None:
        return SeedOutput.claim_lost()

    try:
        content.generate(claimed, seed_input.identity)
    except BaseException:
        logger.exception("Seed populate failed for %s; rolling back", profile.id)
        run_rollback(store, profile.id)
        raise

    finalized = run_finalize(store, profile.id, time, current)
    return SeedOutput.seeded(finalized)


class SeedClaimCoordinator:
    """Binds the store, content step and clock for repeated seed runs."""

    def __init__(
        self,
        store: ProfileStorePort,
        content: SeedContentPort,
        time: TimePort,
        current_version: int = CURRENT_SEED_VERSION,
    ):
        self.store = store
        self.content = content
        self.time = time
        self.current_version = current_version

    def state_of(self, profile: Profile) -> SeedState:
        return seed_state(profile.seed_version, self.current_version)

    def claim(self, profile_id: str) -> Profile | None:
        return run_claim(self.store, profile_id, self.current_version)

    def finalize(self, profile_id: str) -> Profile:
        return run_finalize(self.store, profile_id, self.time, self.current_version)

    def rollback(self, profile_id: str) -> bool:
        return run_rollback(self.store, profile_id)

    def release_stale_claim(self, profile_id: str) -> bool:
        return run_release_stale_claim(self.store, profile_id)

    def reset(self, profile_id: str) -> bool:
        return run_reset_seed(self.store, profile_id)

    def seed(self, seed_input: SeedInput) -> SeedOutput:
        if seed_input.current_version != self.current_version:
            seed_input = SeedInput(
                profile=seed_input.profile,
                identity=seed_input.identity,
                current_version=self.current_version,
            )
        return run_seed(seed_input, self.store, self.content, self.time)


def run(
    seed_input: SeedInput,
    store: ProfileStorePort,
    content: SeedContentPort,
    time: TimePort,
) -> SeedOutput:
    """Main entry point for the seed component."""
    return run_seed(seed_input, store, content, time)
