"""Bootstrap component: the identity bootstrap entry point.

Ensures the caller's profile exists and, when requested, coordinates the
one-time demo seed.
"""

from .component import bootstrap_identity, run, run_bootstrap, run_reset_and_reseed
from .models import (
    DEFAULT_BOOTSTRAP_CONFIG,
    BootstrapConfig,
    BootstrapInput,
    BootstrapOutput,
    ResetSeedOutput,
)
from .ports import IdentityProviderPort, ProfileStorePort, SeedContentPort

__all__ = [
    # Entry points
    "run",
    "run_bootstrap",
    "bootstrap_identity",
    "run_reset_and_reseed",
    # Models
    "BootstrapConfig",
    "BootstrapInput",
    "BootstrapOutput",
    "DEFAULT_BOOTSTRAP_CONFIG",
    "ResetSeedOutput",
    # Ports
    "IdentityProviderPort",
    "ProfileStorePort",
    "SeedContentPort",
]
