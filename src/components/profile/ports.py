"""Profile component port definitions.

Protocol interfaces for external dependencies.
"""

from __future__ import annotations

from typing import Protocol

from src.core.ports.store import ProfileStorePort
from src.core.ports.time import TimePort
from src.domain.entities import SessionClaims


class SessionClaimsPort(Protocol):
    """Best-effort access to the caller's session claims."""

    def current_session_claims(self) -> SessionClaims:
        """Groups and role of the current session."""
        ...


__all__ = ["ProfileStorePort", "SessionClaimsPort", "TimePort"]
