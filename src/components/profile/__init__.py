"""Profile component: one profile per identity, created on first bootstrap.

Also reconciles the plan tier and repairs legacy records missing email or
display name.
"""

from ._impl import (
    build_default_profile,
    claims_indicate_demo,
    is_demo_identity_username,
    pick_display_name,
    resolve_desired_tier,
)
from .component import ProfileBootstrapper, run, run_ensure_profile, run_self_heal
from .models import (
    DEFAULT_IDENTITY_CONFIG,
    EnsureProfileInput,
    EnsureProfileOutput,
    IdentityConfig,
    SelfHealStatus,
)
from .ports import SessionClaimsPort

__all__ = [
    # Entry points
    "run",
    "run_ensure_profile",
    "run_self_heal",
    "ProfileBootstrapper",
    # Helpers
    "build_default_profile",
    "claims_indicate_demo",
    "is_demo_identity_username",
    "pick_display_name",
    "resolve_desired_tier",
    # Models
    "DEFAULT_IDENTITY_CONFIG",
    "EnsureProfileInput",
    "EnsureProfileOutput",
    "IdentityConfig",
    "SelfHealStatus",
    # Ports
    "SessionClaimsPort",
]
