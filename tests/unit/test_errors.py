"""
Error classification tests.

Structured store errors are classified by kind; plain errors fall back to
message inspection.
"""

from dataclasses import dataclass

import pytest

from src.core.errors import (
    ErrorKind,
    MissingRequiredAttributeError,
    classify_error,
    error_to_message,
    is_condition_failure,
    is_email_nullability_violation,
)
from src.core.ports.identity import NotAuthenticatedError
from src.core.ports.store import (
    AlreadyExistsError,
    ConditionFailedError,
    RejectedError,
    SchemaNullabilityError,
)


class GraphQLError(Exception):
    def __init__(self, errors):
        self.errors = errors
        super().__init__("GraphQL request failed")


@dataclass
class ErrorItem:
    message: str
    errorType: str | None = None  # noqa: N815


class TestErrorToMessage:
    def test_plain_exception(self) -> None:
        assert error_to_message(ValueError("boom")) == "boom"

    def test_empty_exception_uses_type_name(self) -> None:
        assert error_to_message(RuntimeError()) == "RuntimeError"

    def test_string(self) -> None:
        assert error_to_message("already a message") == "already a message"

    def test_aggregated_dict_errors(self) -> None:
        err = GraphQLError(
            [
                {"message": "first", "errorType": "DynamoDB:ConditionalCheckFailedException"},
                {"message": "second"},
            ]
        )
        assert error_to_message(err) == (
            "first (DynamoDB:ConditionalCheckFailedException); second"
        )

    def test_aggregated_object_errors(self) -> None:
        err = GraphQLError([ErrorItem("bad", "Unauthorized"), ErrorItem("worse")])
        assert error_to_message(err) == "bad (Unauthorized); worse"

    def test_unknown_object(self) -> None:
        assert error_to_message(object()) == "Unknown error"


class TestConditionFailure:
    def test_structured(self) -> None:
        assert is_condition_failure(ConditionFailedError("u1"))
        assert not is_condition_failure(AlreadyExistsError("u1"))

    @pytest.mark.parametrize(
        "message",
        [
            "The conditional request failed",
            "Transaction cancelled: condition check failed",
            "ConditionalCheckFailedException: nope",
        ],
    )
    def test_message_markers(self, message: str) -> None:
        assert is_condition_failure(RuntimeError(message))

    def test_marker_inside_aggregated_errors(self) -> None:
        err = GraphQLError([{"message": "x", "errorType": "DynamoDB:ConditionalCheckFailedException"}])
        assert is_condition_failure(err)

    def test_unrelated_message(self) -> None:
        assert not is_condition_failure(RuntimeError("network unreachable"))


class TestEmailNullability:
    def test_structured_email(self) -> None:
        err = SchemaNullabilityError("Profile", "email", "/list_profiles/items/3/email")
        assert is_email_nullability_violation(err)

    def test_structured_other_field(self) -> None:
        err = SchemaNullabilityError("Profile", "display_name", "/get_profile/display_name")
        assert not is_email_nullability_violation(err)

    def test_structured_other_entity(self) -> None:
        err = SchemaNullabilityError("Invoice", "email", "/invoice/email")
        assert not is_email_nullability_violation(err)

    def test_message_with_both_parts(self) -> None:
        err = GraphQLError(
            [
                {
                    "message": "Cannot return null for non-nullable type: 'String' "
                    "within parent 'UserProfile' (/listUserProfiles/items/0/email)"
                }
            ]
        )
        assert is_email_nullability_violation(err)

    def test_message_missing_field_name(self) -> None:
        err = RuntimeError("Cannot return null for non-nullable type: 'String' (/x/name)")
        assert not is_email_nullability_violation(err)

    def test_message_missing_nullability_marker(self) -> None:
        assert not is_email_nullability_violation(RuntimeError("email is invalid"))

    def test_email_must_be_a_whole_word(self) -> None:
        err = RuntimeError("Non-Nullable violation on field emailVerified")
        assert not is_email_nullability_violation(err)

    def test_message_for_other_entity(self) -> None:
        err = RuntimeError(
            "Cannot return null for non-nullable type: 'String' "
            "within parent 'Invoice' (/listInvoices/items/0/email)"
        )
        assert not is_email_nullability_violation(err)

    def test_message_missing_entity(self) -> None:
        assert not is_email_nullability_violation(RuntimeError("non-nullable field email"))


class TestClassifyError:
    @pytest.mark.parametrize(
        "err,kind",
        [
            (ConditionFailedError("u1"), ErrorKind.CONDITION_FAILED),
            (AlreadyExistsError("u1"), ErrorKind.ALREADY_EXISTS),
            (RejectedError("owner is not writable"), ErrorKind.REJECTED),
            (SchemaNullabilityError("Profile", "email", "/p/email"), ErrorKind.SCHEMA_NULLABILITY),
            (SchemaNullabilityError("Profile", "bio", "/p/bio"), ErrorKind.UNCLASSIFIED),
            (NotAuthenticatedError(), ErrorKind.NOT_AUTHENTICATED),
            (MissingRequiredAttributeError("email"), ErrorKind.MISSING_REQUIRED_ATTRIBUTE),
            (RuntimeError("The conditional request failed"), ErrorKind.CONDITION_FAILED),
            (RuntimeError("non-nullable field email"), ErrorKind.UNCLASSIFIED),
            (
                RuntimeError("non-nullable type within parent 'Profile' (/p/email)"),
                ErrorKind.SCHEMA_NULLABILITY,
            ),
            (RuntimeError("socket closed"), ErrorKind.UNCLASSIFIED),
        ],
    )
    def test_kinds(self, err: Exception, kind: ErrorKind) -> None:
        assert classify_error(err) is kind

    def test_missing_attribute_message_names_attribute(self) -> None:
        err = MissingRequiredAttributeError("email")
        assert err.attribute == "email"
        assert "email" in str(err)
