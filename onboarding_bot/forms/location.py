"""Step 2 — where the business operates and how many clients it serves."""

import logging
from typing import Any

from pydantic import Field

from onboarding_bot.services.api_client import OnboardingApiClient
from onboarding_bot.wizard import OnboardingSession

from .base import FormField, StepForm, StepValues, matches, min_length

logger = logging.getLogger(__name__)

HOURS_RE = r"^([01]\d|2[0-3]):[0-5]\d$"


class LocationValues(StepValues):
    address: str = Field(..., min_length=5)
    city: str = Field(..., min_length=2)
    state: str = Field(..., min_length=2)
    postal_code: str = Field(..., min_length=5)
    country: str = Field(..., min_length=2)
    service_radius: int | None = Field(None, ge=0)
    operating_hours_start: str | None = Field(None, pattern=HOURS_RE)
    operating_hours_end: str | None = Field(None, pattern=HOURS_RE)
    capacity: int | None = Field(None, ge=1)


class LocationDetailsForm(StepForm):
    step_id = "location-details"
    indicator_title = "Location"
    title = "Location & Service Details"
    description = "Where you operate and how clients can find you"
    model = LocationValues
    fields = (
        FormField(
            "address", "Street address", "Enter your <b>street address</b>:",
            validators=(min_length(5, "⚠️ Address must be at least 5 characters."),),
        ),
        FormField(
            "city", "City", "Enter your <b>city</b>:",
            validators=(min_length(2, "⚠️ City name must be at least 2 characters."),),
        ),
        FormField(
            "state", "State", "Enter your <b>state or province</b>:",
            validators=(min_length(2, "⚠️ State must be at least 2 characters."),),
        ),
        FormField(
            "postal_code", "Postal code", "Enter your <b>postal code</b>:",
            validators=(min_length(5, "⚠️ Postal code must be at least 5 characters."),),
        ),
        FormField(
            "country", "Country", "Pick your <b>country</b> or type it:",
            default="United States",
            choices=(
                ("United States", "United States"),
                ("Canada", "Canada"),
                ("United Kingdom", "United Kingdom"),
                ("Australia", "Australia"),
                ("Other", "Other"),
            ),
            validators=(min_length(2, "⚠️ Country must be at least 2 characters."),),
        ),
        FormField(
            "service_radius", "Service radius", "How far do you <b>travel to clients</b>?",
            required=False, default="5",
            choices=(("5", "5 miles"), ("10", "10 miles"), ("20", "20 miles"), ("50", "50 miles"), ("100", "100+ miles")),
            validators=(matches(r"^\d+$", "⚠️ Service radius must be a whole number of miles."),),
        ),
        FormField(
            "operating_hours_start", "Opening time", "What time do you <b>open</b>? (HH:MM, 24h)",
            required=False, default="09:00",
            validators=(matches(HOURS_RE, "⚠️ Use the HH:MM format, e.g. 09:00."),),
        ),
        FormField(
            "operating_hours_end", "Closing time", "What time do you <b>close</b>? (HH:MM, 24h)",
            required=False, default="17:00",
            validators=(matches(HOURS_RE, "⚠️ Use the HH:MM format, e.g. 17:00."),),
        ),
        FormField(
            "capacity", "Capacity", "How many <b>clients at a time</b> can you serve?",
            required=False, default="1",
            choices=(("1", "1"), ("2", "2"), ("5", "3-5"), ("10", "6-10"), ("20", "11+")),
            validators=(matches(r"^\d+$", "⚠️ Capacity must be a whole number."),),
        ),
    )

    async def save(self, session: OnboardingSession, api: OnboardingApiClient, values: dict[str, Any]) -> bool:
        business_id = session.wizard.form_data.get("id")
        if not business_id:
            logger.warning("Location step submitted before the business was created")
            session.errors = ["Please complete the basic information step first."]
            return False
        await api.update_business(business_id, values)
        logger.info("Location saved: business_id=%s", business_id)
        return True
