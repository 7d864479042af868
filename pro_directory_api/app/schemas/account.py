"""
Pydantic models for professional accounts.

``ProfessionalAccount`` is the single canonical in-memory shape of an
account.  Records reach it from the SQLite store (snake_case) and from
legacy exports and client payloads (camelCase, PostgreSQL array
literals, fees as strings with a dollar sign); every accepted spelling
is declared once here through validation aliases, so nothing else in
the code base needs ``a or b`` fallbacks.
"""

from __future__ import annotations

import csv
import json
from decimal import Decimal, InvalidOperation
from typing import Any, List, Mapping, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from ..services.category_service import ServiceCategorySet, SimilarCategoryWarning

SUBSCRIPTION_STATUSES = ("trial", "active", "past_due", "canceled")


def parse_category_list(value: Any) -> List[str]:
    """Turn any stored representation of a category list into a list.

    Accepts lists/tuples/sets, JSON array strings, PostgreSQL array
    literals (``{"Loan Officer",Plumber}``) and a bare single name.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        return [str(item) for item in value if item is not None]
    if not isinstance(value, str):
        raise ValueError(f"Unsupported category list: {value!r}")
    text = value.strip()
    if not text:
        return []
    if text.startswith("["):
        parsed = json.loads(text)
        if not isinstance(parsed, list):
            raise ValueError("Category list JSON must be an array")
        return [str(item) for item in parsed if item is not None]
    if text.startswith("{") and text.endswith("}"):
        inner = text[1:-1]
        if not inner:
            return []
        row = next(csv.reader([inner], quotechar='"', escapechar="\\"))
        return [item for item in row if item.upper() != "NULL"]
    return [text]


def parse_money(value: Any) -> Optional[Decimal]:
    """Decimal from a stored amount; floats go through ``str`` first."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    text = str(value).strip().lstrip("$").replace(",", "")
    if not text:
        return None
    try:
        return Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Invalid currency amount: {value!r}")


class ProfessionalAccount(BaseModel):
    """Canonical account record.

    ``additional_service_categories`` is kept as a sorted tuple: it is a
    set (order is not significant) with a deterministic representation.
    The validator drops blanks and duplicates, removes the primary from
    the additional categories and, for legacy professional records that
    only carry a category list, promotes the first listed category to
    primary.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[int] = None
    username: str = ""
    email: Optional[str] = None
    business_name: Optional[str] = Field(None, validation_alias=AliasChoices("business_name", "businessName"))
    is_professional: bool = Field(True, validation_alias=AliasChoices("is_professional", "isProfessional"))
    primary_service_category: str = Field(
        "",
        validation_alias=AliasChoices(
            "primary_service_category", "primaryServiceCategory", "service_category", "serviceCategory"
        ),
    )
    additional_service_categories: Tuple[str, ...] = Field(
        (),
        validation_alias=AliasChoices(
            "additional_service_categories",
            "additionalServiceCategories",
            "service_categories",
            "serviceCategories",
        ),
    )
    monthly_fee: Optional[Decimal] = Field(
        None, validation_alias=AliasChoices("monthly_fee", "monthlyFee", "total_monthly_fee", "totalMonthlyFee")
    )
    fee_override: Optional[Decimal] = Field(None, validation_alias=AliasChoices("fee_override", "feeOverride"))
    subscription_status: str = Field(
        "trial", validation_alias=AliasChoices("subscription_status", "subscriptionStatus")
    )
    stripe_customer_id: Optional[str] = Field(
        None, validation_alias=AliasChoices("stripe_customer_id", "stripeCustomerId")
    )
    version: int = 0
    created_at: Optional[str] = Field(None, validation_alias=AliasChoices("created_at", "createdAt"))
    updated_at: Optional[str] = Field(None, validation_alias=AliasChoices("updated_at", "updatedAt"))

    @field_validator("primary_service_category", mode="before")
    @classmethod
    def _primary_or_blank(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("additional_service_categories", mode="before")
    @classmethod
    def _parse_categories(cls, value: Any) -> List[str]:
        return parse_category_list(value)

    @field_validator("monthly_fee", "fee_override", mode="before")
    @classmethod
    def _parse_money(cls, value: Any) -> Optional[Decimal]:
        return parse_money(value)

    @field_validator("subscription_status", mode="before")
    @classmethod
    def _status_or_default(cls, value: Any) -> str:
        return str(value) if value else "trial"

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _timestamp_text(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)

    @model_validator(mode="after")
    def _normalize_categories(self) -> "ProfessionalAccount":
        names = [name.strip() for name in self.additional_service_categories if name and name.strip()]
        primary = self.primary_service_category.strip()
        if not primary and self.is_professional and names:
            primary = names[0]
        self.primary_service_category = primary
        self.additional_service_categories = tuple(sorted({name for name in names if name != primary}))
        return self

    @property
    def category_set(self) -> ServiceCategorySet:
        return ServiceCategorySet(self.primary_service_category, frozenset(self.additional_service_categories))

    def with_categories(self, category_set: ServiceCategorySet) -> "ProfessionalAccount":
        return self.model_copy(
            update={
                "primary_service_category": category_set.primary,
                "additional_service_categories": category_set.sorted_additional(),
            }
        )


def account_from_record(record: Mapping[str, Any]) -> ProfessionalAccount:
    """Map a raw record (store row, legacy export, client payload) to the canonical model."""
    return ProfessionalAccount.model_validate(dict(record))


class AccountCreate(BaseModel):
    """Professional signup: the primary category is fixed from here on."""

    username: str = Field(..., min_length=1, examples=["sparky@example.com"])
    email: Optional[str] = Field(None, examples=["sparky@example.com"])
    business_name: Optional[str] = Field(None, examples=["Sparky Electric LLC"])
    primary_service_category: str = Field(..., min_length=1, examples=["Electrician"])
    subscription_status: str = Field("trial", examples=["trial"])
    stripe_customer_id: Optional[str] = None

    @field_validator("username", "primary_service_category")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("subscription_status")
    @classmethod
    def _known_status(cls, value: str) -> str:
        if value not in SUBSCRIPTION_STATUSES:
            raise ValueError(f"subscription_status must be one of {', '.join(SUBSCRIPTION_STATUSES)}")
        return value


class AccountRead(BaseModel):
    """Account as returned by the API; fees serialize as strings ("34.77")."""

    id: int
    username: str
    email: Optional[str] = None
    business_name: Optional[str] = None
    is_professional: bool
    primary_service_category: str
    additional_service_categories: List[str]
    service_categories: List[str]
    monthly_fee: Optional[Decimal] = None
    fee_override: Optional[Decimal] = None
    subscription_status: str
    version: int
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_account(cls, account: ProfessionalAccount) -> "AccountRead":
        categories = account.category_set
        return cls(
            id=account.id,
            username=account.username,
            email=account.email,
            business_name=account.business_name,
            is_professional=account.is_professional,
            primary_service_category=account.primary_service_category,
            additional_service_categories=list(account.additional_service_categories),
            service_categories=list(categories.all_categories()) if categories.primary else [],
            monthly_fee=account.monthly_fee,
            fee_override=account.fee_override,
            subscription_status=account.subscription_status,
            version=account.version,
            created_at=account.created_at,
            updated_at=account.updated_at,
        )


class AddServiceRequest(BaseModel):
    category: str = Field(..., examples=["Plumber"])
    accept_similar: bool = Field(
        False, description="Add even if the category looks like one already listed"
    )


class SimilarCategoryWarningRead(BaseModel):
    candidate: str
    similar_to: List[str]
    message: str

    @classmethod
    def from_warning(cls, warning: SimilarCategoryWarning) -> "SimilarCategoryWarningRead":
        return cls(candidate=warning.candidate, similar_to=list(warning.similar_to), message=warning.message)


class AddServiceResponse(BaseModel):
    """Outcome of an add-service request.

    ``applied`` is false when a similar category was detected; the
    account is then returned unchanged together with ``warning``.
    """

    applied: bool
    account: AccountRead
    warning: Optional[SimilarCategoryWarningRead] = None
    billing_type: Optional[str] = Field(None, description="'next_cycle' or 'immediate'")


class FeeOverrideUpdate(BaseModel):
    fee_override: Optional[Decimal] = Field(
        None,
        ge=0,
        max_digits=10,
        decimal_places=2,
        description="Special monthly price; null clears it",
        examples=["19.99"],
    )
