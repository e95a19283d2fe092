"""
Identity Provider Interface.

Supplies the current authenticated identity, its attributes and session
claims. Callers re-resolve per operation; nothing here is cached across
sign-out/sign-in.
"""

from __future__ import annotations

from typing import Protocol

from src.domain.entities import Identity, IdentityAttributes, SessionClaims


class IdentityProviderPort(Protocol):
    """Current identity and its attribute/claim sources."""

    def current_identity(self) -> Identity:
        """
        Get the authenticated identity.

        Raises:
            NotAuthenticatedError: no identity is signed in
        """
        ...

    def current_attributes(self) -> IdentityAttributes:
        """Get the identity's attribute bag (email, name, preferred username)."""
        ...

    def current_session_claims(self) -> SessionClaims:
        """Get session claims (groups, role). Best-effort; may raise."""
        ...


class NotAuthenticatedError(Exception):
    """No authenticated identity is available."""

    def __init__(self, reason: str = "No authenticated identity") -> None:
        self.reason = reason
        super().__init__(reason)
