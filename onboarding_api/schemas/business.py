"""Pydantic schemas for business onboarding endpoints."""

from __future__ import annotations
import uuid
from datetime import datetime
from typing import Any
from pydantic import BaseModel, Field, field_validator, model_validator

from onboarding_api.services.categories import BusinessCategory, category_from_label


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class BusinessFields(BaseModel):
    """Optional business fields shared by every write schema.

    Numeric fields accept strings (``"10"``) the way form posts send them;
    empty strings become null. Category accepts any label casing and unknown
    labels become null.
    """
    description: str | None = None
    category: BusinessCategory | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None
    service_radius: int | None = Field(None, ge=0)
    operating_hours_start: str | None = Field(None, pattern=r"^\d{2}:\d{2}$")
    operating_hours_end: str | None = Field(None, pattern=r"^\d{2}:\d{2}$")
    profile_image: str | None = None
    certifications: str | None = None
    promotional_text: str | None = Field(None, max_length=200)
    years_in_business: int | None = Field(None, ge=0)
    capacity: int | None = Field(None, ge=0)

    @field_validator("service_radius", "years_in_business", "capacity", mode="before")
    @classmethod
    def _parse_int(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("category", mode="before")
    @classmethod
    def _parse_category(cls, value: Any) -> Any:
        if isinstance(value, BusinessCategory):
            return value
        return category_from_label(value)


class BusinessCreate(BusinessFields):
    """Schema for creating a complete business record."""
    name: str = Field(..., min_length=2, max_length=255)
    owner_id: uuid.UUID | None = None


class BusinessOnboardingCreate(BusinessFields):
    """Schema for the one-shot onboarding submission (all steps at once)."""
    business_name: str | None = None
    name: str | None = None
    owner_id: uuid.UUID | None = None

    @model_validator(mode="after")
    def _require_name(self) -> "BusinessOnboardingCreate":
        if not (self.business_name or self.name):
            raise ValueError("business_name or name is required")
        return self

    @property
    def resolved_name(self) -> str:
        return self.business_name or self.name


class BasicInfoUpsert(BaseModel):
    """Schema for the first onboarding step — creates or updates by id."""
    id: uuid.UUID | None = None
    owner_id: uuid.UUID | None = None
    business_name: str = Field(..., min_length=2, max_length=255)
    description: str | None = Field(None, max_length=500)
    category: BusinessCategory | None = None
    phone: str | None = None
    email: str | None = None

    @field_validator("category", mode="before")
    @classmethod
    def _parse_category(cls, value: Any) -> Any:
        if isinstance(value, BusinessCategory):
            return value
        return category_from_label(value)


class BusinessUpdate(BusinessFields):
    """Schema for partial updates from later onboarding steps."""
    name: str | None = Field(None, min_length=2, max_length=255)

    @field_validator("name")
    @classmethod
    def _name_not_null(cls, value: str | None) -> str:
        # Only runs when the body sets name; the column is NOT NULL
        if value is None:
            raise ValueError("name cannot be null")
        return value


class BusinessResponse(BaseModel):
    """Schema for returning a business record."""
    id: uuid.UUID
    owner_id: uuid.UUID
    name: str
    description: str | None
    category: str | None
    phone: str | None
    email: str | None
    address: str | None
    city: str | None
    state: str | None
    postal_code: str | None
    country: str | None
    service_radius: int | None
    operating_hours_start: str | None
    operating_hours_end: str | None
    profile_image: str | None
    certifications: str | None
    promotional_text: str | None
    years_in_business: int | None
    capacity: int | None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BusinessSummary(BaseModel):
    """Listing projection."""
    id: uuid.UUID
    name: str
    description: str | None
    category: str | None
    city: str | None
    state: str | None
    profile_image: str | None

    class Config:
        from_attributes = True
