"""Profile document helpers shared by the store adapters."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from src.core.ports.store import (
    PROTECTED_FIELDS,
    REDUCED_OMITTED_FIELDS,
    Projection,
    RejectedError,
    SchemaNullabilityError,
)
from src.domain.entities import Profile

ENTITY = "Profile"


def check_writable(changes: Mapping[str, Any]) -> None:
    """Reject writes to server-side or unknown fields."""
    protected = PROTECTED_FIELDS.intersection(changes)
    if protected:
        raise RejectedError(f"fields are not client-writable: {', '.join(sorted(protected))}")
    unknown = set(changes) - set(Profile.model_fields)
    if unknown:
        raise RejectedError(f"unknown fields: {', '.join(sorted(unknown))}")


def project(doc: Mapping[str, Any], projection: Projection, path: str) -> Profile:
    """
    Build a Profile from a stored document under the given projection.

    FULL enforces the schema's non-null email; REDUCED drops the omitted fields.
    """
    data = dict(doc)
    if projection is Projection.FULL:
        if data.get("email") is None:
            raise SchemaNullabilityError(ENTITY, "email", f"{path}/email")
    else:
        for name in REDUCED_OMITTED_FIELDS:
            data.pop(name, None)
    return Profile.model_validate(data)
