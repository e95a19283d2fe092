"""Bootstrap component implementation.

The public entry point for a signed-in identity: make sure its profile
exists, then, when asked, seed its demo content at most once.

The identity is resolved from the provider on every call; nothing is cached
across calls, so a sign-out/sign-in never sees a stale profile id.
"""

from __future__ import annotations

import logging

from src.components.profile import EnsureProfileInput, run_ensure_profile
from src.components.seed import SeedInput, run_reset_seed, run_seed

from .models import (
    DEFAULT_BOOTSTRAP_CONFIG,
    BootstrapConfig,
    BootstrapInput,
    BootstrapOutput,
    ResetSeedOutput,
)
from .ports import IdentityProviderPort, ProfileStorePort, SeedContentPort, TimePort

logger = logging.getLogger(__name__)


def run_bootstrap(
    bootstrap_input: BootstrapInput,
    identity_provider: IdentityProviderPort,
    store: ProfileStorePort,
    content: SeedContentPort,
    time: TimePort,
    config: BootstrapConfig = DEFAULT_BOOTSTRAP_CONFIG,
) -> BootstrapOutput:
    """Execute the bootstrap process.

    Args:
        bootstrap_input: Whether demo seeding is wanted.
        identity_provider: Source of the current identity, attributes and claims.
        store: Profile store.
        content: Seed content generator, only used when seeding.
        time: Time provider for deterministic timestamps.
        config: Seed version and identity rules.

    Returns:
        BootstrapOutput with profile_id and did_seed_demo.

    Raises:
        NotAuthenticatedError: no signed-in identity.
        MissingRequiredAttributeError: first bootstrap without an email.
        StoreError: propagated from create or finalize, or populate's error.
    """
    # 1. Resolve the caller afresh
    identity = identity_provider.current_identity()
    attributes = identity_provider.current_attributes()

    # 2. Ensure the profile exists
    ensured = run_ensure_profile(
        EnsureProfileInput(identity=identity, attributes=attributes),
        store,
        time,
        claims_source=identity_provider,
        config=config.identity,
    )
    profile = ensured.profile

    if not bootstrap_input.want_seed:
        return BootstrapOutput.profile_only(profile, ensured.created, ensured.healed_fields)

    # 3. Seed at most once
    seeded = run_seed(
        SeedInput(
            profile=profile,
            identity=identity,
            current_version=config.current_seed_version,
        ),
        store,
        content,
        time,
    )
    logger.debug("Bootstrap for %s: seed outcome %s", profile.id, seeded.outcome.value)

    return BootstrapOutput.with_seed(
        seeded.profile or profile,
        ensured.created,
        seeded.outcome,
        seeded.did_seed_demo,
        ensured.healed_fields,
    )


def run_reset_and_reseed(
    identity_provider: IdentityProviderPort,
    store: ProfileStorePort,
    content: SeedContentPort,
    time: TimePort,
    config: BootstrapConfig = DEFAULT_BOOTSTRAP_CONFIG,
) -> ResetSeedOutput:
    """Reset the caller's seed gate, then bootstrap again with a seed.

    A reset refused because a claim is in flight still bootstraps; the seed
    attempt then loses the claim and did_seed_demo is False.
    """
    identity = identity_provider.current_identity()
    reset = run_reset_seed(store, identity.id)
    result = run_bootstrap(
        BootstrapInput(want_seed=True), identity_provider, store, content, time, config
    )
    return ResetSeedOutput(reset=reset, bootstrap=result)


def run(
    bootstrap_input: BootstrapInput,
    identity_provider: IdentityProviderPort,
    store: ProfileStorePort,
    content: SeedContentPort,
    time: TimePort,
    config: BootstrapConfig = DEFAULT_BOOTSTRAP_CONFIG,
) -> BootstrapOutput:
    """Main entry point for the bootstrap component (bootstrap_identity)."""
    return run_bootstrap(bootstrap_input, identity_provider, store, content, time, config)


bootstrap_identity = run
