"""Seed component: at-most-once seed content generation per identity."""

from .component import (
    SeedClaimCoordinator,
    run,
    run_claim,
    run_finalize,
    run_release_stale_claim,
    run_reset_seed,
    run_rollback,
    run_seed,
)
from .models import (
    CURRENT_SEED_VERSION,
    SeedInput,
    SeedOutcome,
    SeedOutput,
    SeedState,
    seed_state,
)
from .ports import SeedContentPort

__all__ = [
    # Entry points
    "run",
    "run_seed",
    "run_claim",
    "run_finalize",
    "run_rollback",
    "run_release_stale_claim",
    "run_reset_seed",
    "SeedClaimCoordinator",
    # Models
    "CURRENT_SEED_VERSION",
    "SeedInput",
    "SeedOutcome",
    "SeedOutput",
    "SeedState",
    "seed_state",
    # Ports
    "SeedContentPort",
]
