# profile-bootstrap - Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from src.core.ports.identity import IdentityProviderPort, NotAuthenticatedError
from src.core.ports.store import (
    AlreadyExistsError,
    Condition,
    ConditionFailedError,
    ProfilePage,
    ProfileStorePort,
    Projection,
    RejectedError,
    SchemaNullabilityError,
    StoreError,
    StoreErrorKind,
)
from src.core.ports.time import TimePort

__all__ = [
    # Identity
    "IdentityProviderPort",
    "NotAuthenticatedError",
    # Store
    "AlreadyExistsError",
    "Condition",
    "ConditionFailedError",
    "ProfilePage",
    "ProfileStorePort",
    "Projection",
    "RejectedError",
    "SchemaNullabilityError",
    "StoreError",
    "StoreErrorKind",
    # Time
    "TimePort",
]
