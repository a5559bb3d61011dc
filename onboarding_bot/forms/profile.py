"""Step 3 — optional profile finishing touches."""

import logging
from typing import Any

from pydantic import Field

from onboarding_bot.services.api_client import OnboardingApiClient
from onboarding_bot.wizard import OnboardingSession

from .base import FormField, StepForm, StepValues, matches, max_length

logger = logging.getLogger(__name__)


class ProfileValues(StepValues):
    profile_image: str | None = None
    certifications: str | None = None
    promotional_text: str | None = Field(None, max_length=200)
    years_in_business: int | None = Field(None, ge=0)


class ProfileCompletionForm(StepForm):
    step_id = "profile-completion"
    indicator_title = "Profile"
    title = "Complete Your Profile"
    description = "Add finishing touches to make your profile stand out"
    model = ProfileValues
    next_label = "Complete Setup"
    fields = (
        FormField(
            "profile_image", "Profile image",
            "Send a <b>photo</b> of your logo or business, or tap Skip.",
            required=False, accepts_photo=True,
        ),
        FormField(
            "certifications", "Certifications",
            "List any <b>certifications</b> or qualifications:",
            required=False,
        ),
        FormField(
            "promotional_text", "Promotional text",
            "Write a short <b>promotional tagline</b> (max 200 characters):",
            required=False,
            validators=(max_length(200, "⚠️ Promotional text must not exceed 200 characters."),),
        ),
        FormField(
            "years_in_business", "Years in business",
            "How many <b>years</b> have you been in business?",
            required=False,
            validators=(matches(r"^\d+$", "⚠️ Please enter a whole number of years."),),
        ),
    )

    async def save(self, session: OnboardingSession, api: OnboardingApiClient, values: dict[str, Any]) -> bool:
        business_id = session.wizard.form_data.get("id")
        if not business_id:
            logger.warning("Profile step submitted before the business was created")
            session.errors = ["Please complete the basic information step first."]
            return False
        await api.update_business(business_id, values)
        logger.info("Profile saved: business_id=%s", business_id)
        return True
