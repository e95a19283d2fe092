"""
Time Adapter Interface.

All timestamps written by the core (created_at, updated_at, seeded_at) are
timezone-aware UTC. Injected so tests can pin the clock.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class TimePort(Protocol):
    """Port for time operations - enables deterministic testing."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
