"""Step 1 — business name, category, contact details and description."""

import logging
from typing import Any

from pydantic import Field, field_validator

from onboarding_api.services.categories import CATEGORY_LABELS, category_from_label
from onboarding_bot.services.api_client import OnboardingApiClient
from onboarding_bot.wizard import OnboardingSession

from .base import FormField, StepForm, StepValues, matches, max_length, min_length

logger = logging.getLogger(__name__)

PHONE_RE = r"^\+?[0-9\s\-\(\)]{7,20}$"
EMAIL_RE = r"^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9.-]+$"


def _is_category(value: str) -> str | None:
    return None if category_from_label(value) else "⚠️ Please select a business category."


class BasicInfoValues(StepValues):
    business_name: str = Field(..., min_length=2)
    category: str
    phone: str = Field(..., pattern=PHONE_RE)
    email: str = Field(..., pattern=EMAIL_RE)
    description: str = Field(..., min_length=10, max_length=500)

    @field_validator("category")
    @classmethod
    def _to_enum(cls, value: str) -> str:
        category = category_from_label(value)
        if category is None:
            raise ValueError("Please select a business category.")
        return category.value

    def to_form_data(self) -> dict[str, Any]:
        data = self.model_dump()
        data["name"] = self.business_name
        return data


class BasicInfoForm(StepForm):
    step_id = "basic-info"
    indicator_title = "Basic Info"
    title = "Business Information"
    description = "Tell us about your wellness business"
    model = BasicInfoValues
    fields = (
        FormField(
            "business_name", "Business name",
            "What is your <b>business name</b>?",
            validators=(min_length(2, "⚠️ Business name must be at least 2 characters."),),
        ),
        FormField(
            "category", "Business category",
            "Pick your <b>business category</b>:",
            choices=tuple((member.value.lower(), label) for member, label in CATEGORY_LABELS.items()),
            validators=(_is_category,),
        ),
        FormField(
            "phone", "Phone number",
            "Enter your <b>phone number</b> (e.g. +1 555 123 4567):",
            validators=(matches(PHONE_RE, "⚠️ Please enter a valid phone number."),),
        ),
        FormField(
            "email", "Business email",
            "Enter your <b>business email</b>:",
            validators=(matches(EMAIL_RE, "⚠️ Please enter a valid email address."),),
        ),
        FormField(
            "description", "Business description",
            "Describe your wellness services and what makes your business special (10–500 characters):",
            validators=(
                min_length(10, "⚠️ Description must be at least 10 characters."),
                max_length(500, "⚠️ Description must not exceed 500 characters."),
            ),
        ),
    )

    async def save(self, session: OnboardingSession, api: OnboardingApiClient, values: dict[str, Any]) -> bool:
        form_data = session.wizard.form_data
        payload = {
            "id": form_data.get("id"),
            "owner_id": form_data.get("owner_id"),
            "business_name": values["business_name"],
            "description": values["description"],
            "category": values["category"],
            "phone": values["phone"],
            "email": values["email"],
        }
        business = await api.save_basic_info(payload)

        # Later steps update this record instead of creating a new one
        session.wizard.update_form_data({"id": business["id"]})
        logger.info("Basic info saved: business_id=%s", business["id"])
        return True
