"""
Tests for input validators, request schemas and the validation envelope.

Run with: pytest tests/test_validation.py -v
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from gym_portal.core.responses import validation_error_body
from gym_portal.core.security import (
    ValidationError,
    sanitize_text,
    validate_email,
    validate_phone,
    validate_positive,
    validate_transaction_status,
    validate_uuid,
)
from gym_portal.schemas import (
    MemberCreate,
    MemberUpdate,
    PricingPlanCreate,
    TransactionCreate,
)


class TestFieldValidators:
    """Tests for the single-value validators."""

    @pytest.mark.parametrize("email", ["ada@example.com", "a.b+c@sub.example.org"])
    def test_valid_email(self, email):
        assert validate_email(email) == email

    @pytest.mark.parametrize("email", ["plainaddress", "a@b", "a b@example.com", "@example.com"])
    def test_invalid_email(self, email):
        with pytest.raises(ValidationError, match="Invalid email format"):
            validate_email(email)

    def test_phone_with_country_code_and_separators_accepted(self):
        assert validate_phone("+1 555-123-4567") == "+1 555-123-4567"

    @pytest.mark.parametrize("phone", ["abc", "12345", "+1 555 123 4567 8901 23"])
    def test_invalid_phone(self, phone):
        with pytest.raises(ValidationError, match="Invalid phone format"):
            validate_phone(phone)

    def test_uuid_is_lowercased(self):
        value = "3F2504E0-4F89-11D3-9A0C-0305E82C3301"
        assert validate_uuid(value, "member ID") == value.lower()

    def test_invalid_uuid_message_names_entity(self):
        with pytest.raises(ValidationError, match="Invalid member ID format"):
            validate_uuid("not-a-uuid", "member ID")

    @pytest.mark.parametrize("value", [0, -1, -0.01, "5", True, None, float("nan"), float("inf"), float("-inf")])
    def test_non_positive_rejected(self, value):
        with pytest.raises(ValidationError, match="Amount must be greater than 0"):
            validate_positive(value, "Amount must be greater than 0")

    def test_positive_accepted(self):
        assert validate_positive(0.5, "nope") == 0.5

    def test_transaction_status_normalized(self):
        assert validate_transaction_status(" Completed ") == "completed"

    def test_unknown_transaction_status(self):
        with pytest.raises(ValidationError, match="Invalid status"):
            validate_transaction_status("refunded")

    def test_sanitize_text_strips_control_characters(self):
        assert sanitize_text("hello\x00 world\x07 ") == "hello world"


class TestSchemas:
    """Tests for create and update request models."""

    def test_member_email_lowercased(self):
        member = MemberCreate(
            first_name="Ada",
            last_name="Lovelace",
            email="Ada@Example.COM",
            phone="+44 20 7946 0958",
        )
        assert member.email == "ada@example.com"

    def test_blank_required_field_reported_missing(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            MemberCreate(first_name="  ", last_name="Lovelace", email="ada@example.com", phone="5551234567")
        missing = [e["loc"][-1] for e in exc_info.value.errors() if e["type"] == "missing"]
        assert missing == ["first_name"]

    def test_zero_price_is_present_but_invalid(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            PricingPlanCreate(name="Gold", price=0, duration_days=30)
        errors = exc_info.value.errors()
        assert all(e["type"] != "missing" for e in errors)
        assert "Price must be greater than 0" in errors[0]["msg"]

    def test_transaction_defaults(self):
        txn = TransactionCreate(
            member_id="3f2504e0-4f89-11d3-9a0c-0305e82c3301",
            amount=49.0,
            payment_method="Card",
            transaction_date="2024-03-01",
        )
        record = txn.to_record()
        assert record["status"] == "pending"
        assert record["payment_method"] == "card"
        assert record["transaction_date"] == "2024-03-01"
        assert record["plan_id"] is None

    def test_update_ignores_id_and_unknown_keys(self):
        update = MemberUpdate.model_validate({"id": "x", "created_at": "y", "first_name": "Ada", "role": "admin"})
        assert update.to_changes() == {"first_name": "Ada"}

    def test_update_rejects_null_for_required_field(self):
        with pytest.raises(PydanticValidationError, match="email cannot be null"):
            MemberUpdate.model_validate({"email": None})

    def test_update_allows_clearing_optional_field(self):
        update = MemberUpdate.model_validate({"subscription_plan_id": None})
        assert update.to_changes() == {"subscription_plan_id": None}


class TestValidationEnvelope:
    """Tests for aggregation of pydantic errors into the 400 body."""

    def test_missing_fields_listed(self):
        errors = [
            {"type": "missing", "loc": ("body", "email"), "msg": "Field required"},
            {"type": "missing", "loc": ("body", "phone"), "msg": "Field required"},
        ]
        assert validation_error_body(errors) == {
            "error": "Missing required fields",
            "missing": ["email", "phone"],
        }

    def test_violation_messages_joined(self):
        errors = [
            {"type": "value_error", "loc": ("body", "email"), "msg": "Value error, Invalid email format"},
            {"type": "value_error", "loc": ("body", "phone"), "msg": "Value error, Invalid phone format"},
        ]
        assert validation_error_body(errors) == {"error": "Invalid email format; Invalid phone format"}

    def test_non_value_errors_prefixed_with_field(self):
        errors = [{"type": "less_than_equal", "loc": ("query", "limit"), "msg": "Input should be less than or equal to 100"}]
        assert validation_error_body(errors) == {"error": "limit: Input should be less than or equal to 100"}

    def test_missing_body(self):
        errors = [{"type": "missing", "loc": ("body",), "msg": "Field required"}]
        assert validation_error_body(errors) == {"error": "Request body is required"}
