"""
Profile Record Store Interface.

Protocol-based interface for the durable profile store, plus the condition
grammar the store evaluates at write time.

Implementations: in-memory (tests/dev), SQLite (JSON document column).

Key requirements:
- Conditions are evaluated atomically against the stored record at write time
  (single-record compare-and-swap). This is the only synchronization primitive.
- A conditional update on a missing record fails with ConditionFailedError.
- `id` and `owner` are server-side fields: updates touching them are rejected.
- The FULL projection enforces the schema's non-null `email`; rows that break
  it raise SchemaNullabilityError. The REDUCED projection omits `email`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from pydantic import TypeAdapter

from src.domain.entities import Profile

# Fields a caller may never write through update().
PROTECTED_FIELDS = frozenset({"id", "owner"})

# Fields the reduced projection leaves out.
REDUCED_OMITTED_FIELDS = ("email",)

_MISSING = object()

_JSON_VALUE: TypeAdapter[Any] = TypeAdapter(Any)


def to_json_value(value: Any) -> Any:
    """Convert a value to its stored JSON form (datetimes to ISO strings, enums to values)."""
    return _JSON_VALUE.dump_python(value, mode="json")


# -----------------------------------------------------------------------------
# Conditions
# -----------------------------------------------------------------------------


def _normalize(value: Any) -> Any:
    """Convert an operand to its stored (JSON) form."""
    return to_json_value(value)


class Condition:
    """Predicate over a record's current stored state."""

    def evaluate(self, record: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def __and__(self, other: Condition) -> AllOf:
        return AllOf((self, other))

    def __or__(self, other: Condition) -> AnyOf:
        return AnyOf((self, other))


@dataclass(frozen=True)
class AttributeExists(Condition):
    field: str
    exists: bool = True

    def evaluate(self, record: Mapping[str, Any]) -> bool:
        return (self.field in record) is self.exists


@dataclass(frozen=True)
class AttributeIsNull(Condition):
    """Attribute is present and holds the null type."""

    field: str

    def evaluate(self, record: Mapping[str, Any]) -> bool:
        return self.field in record and record[self.field] is None


@dataclass(frozen=True)
class Equals(Condition):
    field: str
    value: Any

    def evaluate(self, record: Mapping[str, Any]) -> bool:
        current = record.get(self.field, _MISSING)
        if current is _MISSING or current is None:
            return False
        return bool(current == _normalize(self.value))


@dataclass(frozen=True)
class NotEquals(Condition):
    field: str
    value: Any

    def evaluate(self, record: Mapping[str, Any]) -> bool:
        current = record.get(self.field, _MISSING)
        if current is _MISSING or current is None:
            return True
        return bool(current != _normalize(self.value))


@dataclass(frozen=True)
class LessThan(Condition):
    field: str
    value: Any

    def evaluate(self, record: Mapping[str, Any]) -> bool:
        current = record.get(self.field, _MISSING)
        if current is _MISSING or current is None:
            return False
        try:
            return bool(current < _normalize(self.value))
        except TypeError:
            return False


@dataclass(frozen=True)
class AllOf(Condition):
    conditions: tuple[Condition, ...]

    def evaluate(self, record: Mapping[str, Any]) -> bool:
        return all(c.evaluate(record) for c in self.conditions)


@dataclass(frozen=True)
class AnyOf(Condition):
    conditions: tuple[Condition, ...]

    def evaluate(self, record: Mapping[str, Any]) -> bool:
        return any(c.evaluate(record) for c in self.conditions)


def attribute_exists(field_name: str) -> Condition:
    return AttributeExists(field_name, True)


def attribute_not_exists(field_name: str) -> Condition:
    return AttributeExists(field_name, False)


def attribute_is_null_type(field_name: str) -> Condition:
    return AttributeIsNull(field_name)


def equals(field_name: str, value: Any) -> Condition:
    return Equals(field_name, value)


def not_equals(field_name: str, value: Any) -> Condition:
    return NotEquals(field_name, value)


def less_than(field_name: str, value: Any) -> Condition:
    return LessThan(field_name, value)


def all_of(*conditions: Condition) -> Condition:
    return AllOf(tuple(conditions))


def any_of(*conditions: Condition) -> Condition:
    return AnyOf(tuple(conditions))


def missing_or_blank(field_name: str) -> Condition:
    """Field is absent, null-typed, or the empty string."""
    return any_of(
        attribute_not_exists(field_name),
        attribute_is_null_type(field_name),
        equals(field_name, ""),
    )


# -----------------------------------------------------------------------------
# Queries
# -----------------------------------------------------------------------------


class Projection(Enum):
    """Which fields a read returns."""

    FULL = "full"
    REDUCED = "reduced"


@dataclass
class ProfilePage:
    """One page of a profile listing."""

    items: list[Profile] = field(default_factory=list)
    cursor: str | None = None


class ProfileStorePort(Protocol):
    """
    Durable profile store.

    Every call is a single atomic request/response unit.
    """

    def get(self, profile_id: str, projection: Projection = Projection.FULL) -> Profile | None:
        """Get a profile by id, or None if absent."""
        ...

    def create(self, profile: Profile) -> Profile:
        """
        Create a profile.

        Raises:
            AlreadyExistsError: a record with the same id exists
            RejectedError: the store refused the record
        """
        ...

    def update(
        self,
        profile_id: str,
        changes: Mapping[str, Any],
        condition: Condition | None = None,
    ) -> Profile:
        """
        Apply a partial update, guarded by an optional condition.

        Raises:
            ConditionFailedError: the condition did not hold (or no record)
            RejectedError: the store refused the change
        """
        ...

    def list_profiles(
        self,
        where: Condition | None = None,
        cursor: str | None = None,
        page_size: int = 50,
        projection: Projection = Projection.FULL,
    ) -> ProfilePage:
        """List profiles matching `where`, one page at a time."""
        ...


# -----------------------------------------------------------------------------
# Error types
# -----------------------------------------------------------------------------


class StoreErrorKind(str, Enum):
    """Structured error kinds raised at the store boundary."""

    CONDITION_FAILED = "condition_failed"
    ALREADY_EXISTS = "already_exists"
    REJECTED = "rejected"
    SCHEMA_NULLABILITY = "schema_nullability"
    UNCLASSIFIED = "unclassified"


class StoreError(Exception):
    """Base class for store errors."""

    kind: StoreErrorKind = StoreErrorKind.UNCLASSIFIED


class ConditionFailedError(StoreError):
    """Raised when a conditional write's condition does not hold."""

    kind = StoreErrorKind.CONDITION_FAILED

    def __init__(self, profile_id: str) -> None:
        self.profile_id = profile_id
        super().__init__(f"The conditional request failed: {profile_id}")


class AlreadyExistsError(StoreError):
    """Raised when creating a record whose id is taken."""

    kind = StoreErrorKind.ALREADY_EXISTS

    def __init__(self, profile_id: str) -> None:
        self.profile_id = profile_id
        super().__init__(f"Record already exists: {profile_id}")


class RejectedError(StoreError):
    """Raised when the store refuses a write."""

    kind = StoreErrorKind.REJECTED

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Request rejected: {reason}")


class SchemaNullabilityError(StoreError):
    """Raised when a stored row violates a non-nullable field of the projection."""

    kind = StoreErrorKind.SCHEMA_NULLABILITY

    def __init__(self, entity: str, field_name: str, path: str) -> None:
        self.entity = entity
        self.field = field_name
        self.path = path
        super().__init__(
            f"Cannot return null for non-nullable type: 'String' within parent "
            f"'{entity}' ({path})"
        )
