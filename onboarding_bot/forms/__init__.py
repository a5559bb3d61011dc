"""Concrete onboarding step forms and the wizard they compose."""

from onboarding_bot.wizard import StepRegistry

from .base import BusinessFormData, FormField, StepForm
from .basic_info import BasicInfoForm
from .location import LocationDetailsForm
from .profile import ProfileCompletionForm
from .success import OnboardingSuccess

ONBOARDING_FORMS: tuple[StepForm, ...] = (
    BasicInfoForm(),
    LocationDetailsForm(),
    ProfileCompletionForm(),
    OnboardingSuccess(),
)

FORMS_BY_STEP: dict[str, StepForm] = {form.step_id: form for form in ONBOARDING_FORMS}

ONBOARDING_STEPS = StepRegistry(form.descriptor for form in ONBOARDING_FORMS)

__all__ = [
    "BusinessFormData",
    "FormField",
    "StepForm",
    "BasicInfoForm",
    "LocationDetailsForm",
    "ProfileCompletionForm",
    "OnboardingSuccess",
    "ONBOARDING_FORMS",
    "FORMS_BY_STEP",
    "ONBOARDING_STEPS",
]
