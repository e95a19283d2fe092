"""
Error classification for the bootstrap core.

Structured store errors (StoreError subclasses) are classified by their kind.
Anything else falls back to message inspection, which exists for transports
that only surface error text (e.g. a GraphQL `errors` array).

Key behaviors:
- ConditionFailed is an expected race-loss signal, never an error to callers
- A schema nullability violation only counts when it names the `email` field
  of the profile entity; any other field or entity stays UNCLASSIFIED
- NotAuthenticated and MissingRequiredAttribute are fatal preconditions
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from enum import Enum
from typing import Any

from src.core.ports.identity import NotAuthenticatedError
from src.core.ports.store import StoreError, StoreErrorKind

PROFILE_ENTITY = "Profile"
EMAIL_FIELD = "email"

_CONDITION_MARKERS = ("conditional", "condition check", "conditionalcheckfailed")
_NULLABILITY_MARKER = "non-nullable"
_EMAIL_WORD = re.compile(rf"\b{EMAIL_FIELD}\b", re.IGNORECASE)
# Parent type named in the message: Profile or a prefixed form such as UserProfile.
_PROFILE_PARENT = re.compile(rf"\b\w*{PROFILE_ENTITY}\b")


class ErrorKind(str, Enum):
    CONDITION_FAILED = "condition_failed"
    ALREADY_EXISTS = "already_exists"
    REJECTED = "rejected"
    SCHEMA_NULLABILITY = "schema_nullability"
    NOT_AUTHENTICATED = "not_authenticated"
    MISSING_REQUIRED_ATTRIBUTE = "missing_required_attribute"
    UNCLASSIFIED = "unclassified"


class ProfileBootstrapError(Exception):
    """Base error raised by the bootstrap core itself."""


class MissingRequiredAttributeError(ProfileBootstrapError):
    """The identity lacks an attribute required to create a profile."""

    def __init__(self, attribute: str) -> None:
        self.attribute = attribute
        super().__init__(
            f"Profile requires '{attribute}', but none was found in identity attributes"
        )


def _messages_from_errors(errors: Iterable[Any]) -> list[str]:
    messages: list[str] = []
    for item in errors:
        if isinstance(item, dict):
            msg = item.get("message")
            err_type = item.get("errorType")
        else:
            msg = getattr(item, "message", None)
            err_type = getattr(item, "errorType", None)
        text = msg if isinstance(msg, str) else "Unknown error"
        if isinstance(err_type, str) and err_type:
            text = f"{text} ({err_type})"
        messages.append(text)
    return messages


def error_to_message(err: object) -> str:
    """
    Flatten an error into one message string.

    Aggregated errors (an `errors` list of dicts or objects carrying `message`
    and optional `errorType`) are joined with "; ".
    """
    if isinstance(err, str):
        return err
    errors = getattr(err, "errors", None)
    if isinstance(errors, list | tuple) and errors:
        return "; ".join(_messages_from_errors(errors))
    if isinstance(err, BaseException):
        return str(err) or type(err).__name__
    return "Unknown error"


def is_condition_failure(err: object) -> bool:
    """True when the error signals a failed conditional write."""
    if isinstance(err, StoreError):
        return err.kind is StoreErrorKind.CONDITION_FAILED
    msg = error_to_message(err).lower()
    return any(marker in msg for marker in _CONDITION_MARKERS)


def is_email_nullability_violation(err: object) -> bool:
    """
    True only when the error is a non-nullable violation on the profile email field.

    Message text must name the marker, the `email` field and the profile
    entity; any part missing leaves the error unclassified.
    """
    if isinstance(err, StoreError) and err.kind is StoreErrorKind.SCHEMA_NULLABILITY:
        field_name = getattr(err, "field", None)
        entity = getattr(err, "entity", PROFILE_ENTITY)
        return field_name == EMAIL_FIELD and entity == PROFILE_ENTITY
    msg = error_to_message(err)
    return (
        _NULLABILITY_MARKER in msg.lower()
        and _EMAIL_WORD.search(msg) is not None
        and _PROFILE_PARENT.search(msg) is not None
    )


def classify_error(err: object) -> ErrorKind:
    """Map an error to its ErrorKind."""
    if isinstance(err, NotAuthenticatedError):
        return ErrorKind.NOT_AUTHENTICATED
    if isinstance(err, MissingRequiredAttributeError):
        return ErrorKind.MISSING_REQUIRED_ATTRIBUTE
    if isinstance(err, StoreError) and err.kind is not StoreErrorKind.UNCLASSIFIED:
        if err.kind is StoreErrorKind.SCHEMA_NULLABILITY:
            if is_email_nullability_violation(err):
                return ErrorKind.SCHEMA_NULLABILITY
            return ErrorKind.UNCLASSIFIED
        return ErrorKind(err.kind.value)
    if is_condition_failure(err):
        return ErrorKind.CONDITION_FAILED
    if is_email_nullability_violation(err):
        return ErrorKind.SCHEMA_NULLABILITY
    return ErrorKind.UNCLASSIFIED
