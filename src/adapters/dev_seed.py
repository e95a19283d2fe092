"""
Seed content adapters.

DevSeedContent logs instead of generating anything and records each call
for assertions. CallbackSeedContent adapts a plain function to the port.

Key behaviors:
- A configured failure is raised after the call is recorded
- An optional delay widens race windows in concurrency tests
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from src.domain.entities import Identity, Profile

logger = logging.getLogger(__name__)


@dataclass
class SeedCall:
    """Record of one populate invocation."""

    profile_id: str
    identity_id: str
    seed_version: int


@dataclass
class DevSeedContent:
    """Logging no-op implementation of SeedContentPort."""

    fail_with: BaseException | None = None
    delay_seconds: float = 0.0
    calls: list[SeedCall] = field(default_factory=list)

    def generate(self, profile: Profile, identity: Identity) -> None:
        self.calls.append(
            SeedCall(
                profile_id=profile.id,
                identity_id=identity.id,
                seed_version=profile.seed_version,
            )
        )
        logger.info("[dev-seed] generating demo content for %s", profile.id)
        if self.delay_seconds:
            time.sleep(self.delay_seconds)
        if self.fail_with is not None:
            raise self.fail_with

    @property
    def call_count(self) -> int:
        return len(self.calls)


class CallbackSeedContent:
    """SeedContentPort backed by a callable(profile, identity)."""

    def __init__(self, callback: Callable[[Profile, Identity], None]):
        self._callback = callback

    def generate(self, profile: Profile, identity: Identity) -> None:
        self._callback(profile, identity)
