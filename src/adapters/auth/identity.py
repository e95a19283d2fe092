"""
Identity provider adapters.

ClaimsIdentityProvider reads an already-verified claims dict (the payload of
an ID/access token). TokenIdentityProvider verifies a bearer JWT first.
StaticIdentityProvider serves fixed values for the CLI and tests.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from src.api.auth_utils import decode_access_token
from src.core.ports.identity import NotAuthenticatedError
from src.domain.entities import Identity, IdentityAttributes, SessionClaims

logger = logging.getLogger(__name__)

USERNAME_CLAIMS = ("username", "cognito:username")
GROUPS_CLAIM = "cognito:groups"
ROLE_CLAIM = "custom:role"


def _str_claim(claims: Mapping[str, Any], *names: str) -> str | None:
    for name in names:
        value = claims.get(name)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _groups(value: Any) -> set[str]:
    # Some issuers send a space-separated string instead of a list.
    if isinstance(value, str):
        return {g for g in value.split() if g}
    if isinstance(value, Iterable):
        return {str(g).strip() for g in value if str(g).strip()}
    return set()


class ClaimsIdentityProvider:
    """IdentityProviderPort over a verified claims mapping."""

    def __init__(self, claims: Mapping[str, Any] | None):
        self._claims = dict(claims) if claims else None

    def _require(self) -> dict[str, Any]:
        if not self._claims:
            raise NotAuthenticatedError()
        return self._claims

    def current_identity(self) -> Identity:
        claims = self._require()
        sub = _str_claim(claims, "sub")
        if sub is None:
            raise NotAuthenticatedError("Token has no subject")
        return Identity(id=sub, username=_str_claim(claims, *USERNAME_CLAIMS))

    def current_attributes(self) -> IdentityAttributes:
        claims = self._require()
        return IdentityAttributes(
            email=_str_claim(claims, "email"),
            name=_str_claim(claims, "name"),
            preferred_username=_str_claim(claims, "preferred_username"),
            role=_str_claim(claims, ROLE_CLAIM),
        )

    def current_session_claims(self) -> SessionClaims:
        claims = self._require()
        return SessionClaims(
            groups=_groups(claims.get(GROUPS_CLAIM)),
            role=_str_claim(claims, ROLE_CLAIM) or "",
        )


class TokenIdentityProvider(ClaimsIdentityProvider):
    """IdentityProviderPort over a bearer JWT; invalid or missing tokens are unauthenticated."""

    def __init__(self, token: str | None, secret_key: str | None = None):
        payload = decode_access_token(token, secret_key) if token else None
        if token and payload is None:
            logger.info("Rejected invalid bearer token")
        super().__init__(payload)


class StaticIdentityProvider:
    """Fixed identity for the CLI and tests. identity=None means signed out."""

    def __init__(
        self,
        identity: Identity | None,
        attributes: IdentityAttributes | None = None,
        claims: SessionClaims | None = None,
        claims_error: Exception | None = None,
    ):
        self.identity = identity
        self.attributes = attributes or IdentityAttributes()
        self.claims = claims or SessionClaims()
        self.claims_error = claims_error
        self.identity_calls = 0

    def current_identity(self) -> Identity:
        self.identity_calls += 1
        if self.identity is None:
            raise NotAuthenticatedError()
        return self.identity

    def current_attributes(self) -> IdentityAttributes:
        return self.attributes

    def current_session_claims(self) -> SessionClaims:
        if self.claims_error is not None:
            raise self.claims_error
        return self.claims
