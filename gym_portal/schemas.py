"""
Pydantic models for request/response validation.

Create models declare the required fields for each entity; update models are
explicit partial updates that whitelist what a client may change. Unknown
keys (including ``id``) are ignored.
"""

from datetime import date, datetime
from typing import Any, ClassVar, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from gym_portal.core.security import (
    MAX_NAME_LENGTH,
    MAX_TEXT_LENGTH,
    MAX_URL_LENGTH,
    sanitize_text,
    validate_email,
    validate_phone,
    validate_positive,
    validate_transaction_status,
    validate_uuid,
)

T = TypeVar("T")


# -----------------------------------------------------------------------------
# Base Models
# -----------------------------------------------------------------------------

class BaseSchema(BaseModel):
    """Base schema with common configuration."""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        extra="ignore",
    )


class CreateSchema(BaseSchema):
    """
    Base for create payloads.

    A required field sent as ``null`` or as a blank string is treated as
    absent, so it is reported under ``missing`` rather than as a type error.
    """

    @model_validator(mode="before")
    @classmethod
    def drop_blank_required(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        required = {name for name, info in cls.model_fields.items() if info.is_required()}
        return {
            key: value
            for key, value in data.items()
            if not (
                key in required
                and (value is None or (isinstance(value, str) and not value.strip()))
            )
        }

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class UpdateSchema(BaseSchema):
    """Base for partial updates: only fields present in the request are applied."""

    # Fields that may be cleared by sending null
    nullable_fields: ClassVar[frozenset] = frozenset()

    @model_validator(mode="after")
    def reject_null_required(self) -> "UpdateSchema":
        for name in self.model_fields_set:
            if name not in self.nullable_fields and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def to_changes(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True)


def _optional_uuid(value: Optional[str], label: str, field: str) -> Optional[str]:
    if value is None or value == "":
        return None
    return validate_uuid(value, label, field=field)


def _optional_text(value: Optional[str]) -> Optional[str]:
    cleaned = sanitize_text(value)
    return cleaned or None


# -----------------------------------------------------------------------------
# Members
# -----------------------------------------------------------------------------

class MemberCreate(CreateSchema):
    """Request to create a member."""
    first_name: str = Field(..., max_length=MAX_NAME_LENGTH)
    last_name: str = Field(..., max_length=MAX_NAME_LENGTH)
    email: str = Field(..., max_length=254)
    phone: str = Field(..., max_length=32)
    photo_url: Optional[str] = Field(None, max_length=MAX_URL_LENGTH)
    address: Optional[str] = Field(None, max_length=MAX_TEXT_LENGTH)
    health_issues: Optional[str] = Field(None, max_length=MAX_TEXT_LENGTH)
    subscription_plan_id: Optional[str] = None
    subscription_start_date: Optional[date] = None
    subscription_expiry_date: Optional[date] = None
    last_fee_paid_date: Optional[date] = None

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v: str) -> str:
        return validate_email(v).lower()

    @field_validator("phone")
    @classmethod
    def validate_phone_field(cls, v: str) -> str:
        return validate_phone(v)

    @field_validator("subscription_plan_id")
    @classmethod
    def validate_plan_id_field(cls, v: Optional[str]) -> Optional[str]:
        return _optional_uuid(v, "pricing plan ID", "subscription_plan_id")

    @field_validator("address", "health_issues")
    @classmethod
    def clean_text(cls, v: Optional[str]) -> Optional[str]:
        return _optional_text(v)


class MemberUpdate(UpdateSchema):
    """Partial update of a member."""
    nullable_fields: ClassVar[frozenset] = frozenset({
        "photo_url",
        "address",
        "health_issues",
        "subscription_plan_id",
        "subscription_start_date",
        "subscription_expiry_date",
        "last_fee_paid_date",
    })

    first_name: Optional[str] = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    last_name: Optional[str] = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    email: Optional[str] = Field(None, max_length=254)
    phone: Optional[str] = Field(None, max_length=32)
    photo_url: Optional[str] = Field(None, max_length=MAX_URL_LENGTH)
    address: Optional[str] = Field(None, max_length=MAX_TEXT_LENGTH)
    health_issues: Optional[str] = Field(None, max_length=MAX_TEXT_LENGTH)
    subscription_plan_id: Optional[str] = None
    subscription_start_date: Optional[date] = None
    subscription_expiry_date: Optional[date] = None
    last_fee_paid_date: Optional[date] = None

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v: Optional[str]) -> Optional[str]:
        return validate_email(v).lower() if v is not None else None

    @field_validator("phone")
    @classmethod
    def validate_phone_field(cls, v: Optional[str]) -> Optional[str]:
        return validate_phone(v) if v is not None else None

    @field_validator("subscription_plan_id")
    @classmethod
    def validate_plan_id_field(cls, v: Optional[str]) -> Optional[str]:
        return _optional_uuid(v, "pricing plan ID", "subscription_plan_id")

    @field_validator("address", "health_issues")
    @classmethod
    def clean_text(cls, v: Optional[str]) -> Optional[str]:
        return _optional_text(v)


class MemberSummary(BaseSchema):
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class MemberRecord(MemberSummary):
    photo_url: Optional[str] = None
    address: Optional[str] = None
    health_issues: Optional[str] = None
    subscription_plan_id: Optional[str] = None
    subscription_start_date: Optional[str] = None
    subscription_expiry_date: Optional[str] = None
    last_fee_paid_date: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class MemberStats(BaseSchema):
    totalMembers: int
    activeSubscriptions: int
    expiredSubscriptions: int
    noSubscription: int


# -----------------------------------------------------------------------------
# Pricing Plans
# -----------------------------------------------------------------------------

class PricingPlanCreate(CreateSchema):
    """Request to create a pricing plan."""
    name: str = Field(..., max_length=MAX_NAME_LENGTH)
    description: Optional[str] = Field(None, max_length=MAX_TEXT_LENGTH)
    price: float
    duration_days: int
    features: List[str] = Field(default_factory=list, max_length=50)
    is_active: bool = True

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: float) -> float:
        return validate_positive(v, "Price must be greater than 0", field="price")

    @field_validator("duration_days")
    @classmethod
    def validate_duration(cls, v: int) -> int:
        return validate_positive(v, "Duration days must be greater than 0", field="duration_days")

    @field_validator("description")
    @classmethod
    def clean_description(cls, v: Optional[str]) -> Optional[str]:
        return _optional_text(v)


class PricingPlanUpdate(UpdateSchema):
    """Partial update of a pricing plan."""
    nullable_fields: ClassVar[frozenset] = frozenset({"description"})

    name: Optional[str] = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    description: Optional[str] = Field(None, max_length=MAX_TEXT_LENGTH)
    price: Optional[float] = None
    duration_days: Optional[int] = None
    features: Optional[List[str]] = Field(None, max_length=50)
    is_active: Optional[bool] = None

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: Optional[float]) -> Optional[float]:
        if v is None:
            return v
        return validate_positive(v, "Price must be greater than 0", field="price")

    @field_validator("duration_days")
    @classmethod
    def validate_duration(cls, v: Optional[int]) -> Optional[int]:
        if v is None:
            return v
        return validate_positive(v, "Duration days must be greater than 0", field="duration_days")

    @field_validator("description")
    @classmethod
    def clean_description(cls, v: Optional[str]) -> Optional[str]:
        return _optional_text(v)


class PricingPlanSummary(BaseSchema):
    id: str
    name: Optional[str] = None
    price: Optional[float] = None
    duration_days: Optional[int] = None


class PricingPlanRecord(PricingPlanSummary):
    description: Optional[str] = None
    features: List[str] = Field(default_factory=list)
    is_active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# -----------------------------------------------------------------------------
# Transactions
# -----------------------------------------------------------------------------

class TransactionCreate(CreateSchema):
    """Request to record a payment transaction."""
    member_id: str
    plan_id: Optional[str] = None
    amount: float
    payment_method: str = Field(..., max_length=50)
    transaction_date: date
    status: str = "pending"
    notes: Optional[str] = Field(None, max_length=MAX_TEXT_LENGTH)

    @field_validator("member_id")
    @classmethod
    def validate_member_id(cls, v: str) -> str:
        return validate_uuid(v, "member ID", field="member_id")

    @field_validator("plan_id")
    @classmethod
    def validate_plan_id(cls, v: Optional[str]) -> Optional[str]:
        return _optional_uuid(v, "pricing plan ID", "plan_id")

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: float) -> float:
        return validate_positive(v, "Amount must be greater than 0", field="amount")

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        return validate_transaction_status(v)

    @field_validator("payment_method")
    @classmethod
    def normalize_payment_method(cls, v: str) -> str:
        return v.lower()

    @field_validator("notes")
    @classmethod
    def clean_notes(cls, v: Optional[str]) -> Optional[str]:
        return _optional_text(v)


class TransactionUpdate(UpdateSchema):
    """Partial update of a transaction."""
    nullable_fields: ClassVar[frozenset] = frozenset({"plan_id", "notes"})

    member_id: Optional[str] = None
    plan_id: Optional[str] = None
    amount: Optional[float] = None
    payment_method: Optional[str] = Field(None, min_length=1, max_length=50)
    transaction_date: Optional[date] = None
    status: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=MAX_TEXT_LENGTH)

    @field_validator("member_id")
    @classmethod
    def validate_member_id(cls, v: Optional[str]) -> Optional[str]:
        return validate_uuid(v, "member ID", field="member_id") if v is not None else None

    @field_validator("plan_id")
    @classmethod
    def validate_plan_id(cls, v: Optional[str]) -> Optional[str]:
        return _optional_uuid(v, "pricing plan ID", "plan_id")

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: Optional[float]) -> Optional[float]:
        if v is None:
            return v
        return validate_positive(v, "Amount must be greater than 0", field="amount")

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: Optional[str]) -> Optional[str]:
        return validate_transaction_status(v) if v is not None else None

    @field_validator("payment_method")
    @classmethod
    def normalize_payment_method(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v is not None else None

    @field_validator("notes")
    @classmethod
    def clean_notes(cls, v: Optional[str]) -> Optional[str]:
        return _optional_text(v)


class TransactionRecord(BaseSchema):
    id: str
    member_id: str
    plan_id: Optional[str] = None
    amount: float
    payment_method: str
    transaction_date: str
    status: str
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    member: Optional[MemberSummary] = None
    plan: Optional[PricingPlanSummary] = None


# -----------------------------------------------------------------------------
# Envelopes
# -----------------------------------------------------------------------------

class PaginationInfo(BaseSchema):
    page: int
    limit: int
    total: int
    totalPages: int
    hasNext: bool
    hasPrev: bool


class DataResponse(BaseModel, Generic[T]):
    """Single-object success envelope."""
    data: T


class ListResponse(BaseModel, Generic[T]):
    """Paginated list envelope."""
    data: List[T]
    pagination: PaginationInfo


class HealthResponse(BaseSchema):
    """Health check response."""
    status: str = "healthy"
    version: str
    timestamp: datetime


# -----------------------------------------------------------------------------
# Auth Callback
# -----------------------------------------------------------------------------

class CodeExchangeRequest(BaseSchema):
    """Programmatic OAuth code exchange."""
    code: Optional[str] = Field(None, max_length=2048)
    next: Optional[str] = Field(None, max_length=MAX_URL_LENGTH)


class CodeExchangeResponse(BaseSchema):
    success: bool
    user: Optional[Dict[str, Any]] = None
    redirect: str
