"""Bootstrap component port definitions.

Protocol interfaces for external dependencies.
"""

from __future__ import annotations

from src.components.seed.ports import SeedContentPort
from src.core.ports.identity import IdentityProviderPort
from src.core.ports.store import ProfileStorePort
from src.core.ports.time import TimePort

__all__ = ["IdentityProviderPort", "ProfileStorePort", "SeedContentPort", "TimePort"]
