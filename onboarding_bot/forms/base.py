"""
Step forms — field schema, validation and persistence for one wizard step.

A form collects its fields one chat message at a time. Each accepted answer
is merged into the wizard's form data straight away; on submit the whole step
is re-validated with a pydantic model, the converted values are merged back,
and the step's record is saved.
"""

import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, TypedDict

from pydantic import BaseModel, ValidationError

from onboarding_bot.services.api_client import OnboardingApiClient
from onboarding_bot.wizard import OnboardingSession, StepDescriptor

logger = logging.getLogger(__name__)

Validator = Callable[[str], str | None]


class BusinessFormData(TypedDict, total=False):
    """Every key the onboarding forms read or write."""
    id: str
    owner_id: str
    business_name: str
    name: str
    description: str
    category: str | None
    phone: str
    email: str
    address: str
    city: str
    state: str
    postal_code: str
    country: str
    service_radius: int | None
    operating_hours_start: str | None
    operating_hours_end: str | None
    capacity: int | None
    profile_image: str | None
    certifications: str | None
    promotional_text: str | None
    years_in_business: int | None


# ── Field validators ─────────────────────────────────────

def min_length(size: int, message: str) -> Validator:
    return lambda value: message if len(value) < size else None


def max_length(size: int, message: str) -> Validator:
    return lambda value: message if len(value) > size else None


def matches(pattern: str, message: str) -> Validator:
    regex = re.compile(pattern)
    return lambda value: None if regex.match(value) else message


@dataclass(frozen=True)
class FormField:
    name: str
    label: str
    prompt: str
    required: bool = True
    default: str | None = None
    choices: tuple[tuple[str, str], ...] = ()  # (value, button label)
    validators: tuple[Validator, ...] = ()
    accepts_photo: bool = False

    def clean(self, raw: str | None) -> tuple[str | None, str | None]:
        """Return ``(value, error)``; exactly one of them is meaningful."""
        value = (raw or "").strip()
        if not value:
            if self.required:
                return None, f"⚠️ {self.label} is required."
            return None, None
        for validator in self.validators:
            error = validator(value)
            if error:
                return None, error
        return value, None


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class StepValues(BaseModel):
    """Base for per-step pydantic models."""

    def to_form_data(self) -> dict[str, Any]:
        return self.model_dump()


class StepForm:
    """
    Base class for one onboarding step's content.

    Subclasses set the class attributes and implement ``save``.
    """

    step_id: str = ""
    title: str = ""
    description: str = ""
    indicator_title: str = ""
    fields: tuple[FormField, ...] = ()
    model: type[StepValues] | None = None
    next_label: str = "Continue"
    show_back: bool = True

    @property
    def descriptor(self) -> StepDescriptor:
        return StepDescriptor(self.step_id, self.indicator_title or self.title, self.description)

    def field_at(self, index: int) -> FormField | None:
        if 0 <= index < len(self.fields):
            return self.fields[index]
        return None

    def current_value(self, form_data: Mapping[str, Any], form_field: FormField) -> Any:
        """Value to show for a field: what was collected, else its default."""
        if form_field.name in form_data:
            return form_data[form_field.name]
        return form_field.default

    def accept(self, session: OnboardingSession, form_field: FormField, raw: str | None) -> str | None:
        """Validate one answer and merge it into the form data. Returns an error message or None."""
        value, error = form_field.clean(raw)
        if error:
            return error
        session.wizard.update_form_data({form_field.name: value})
        return None

    def validate(self, form_data: Mapping[str, Any]) -> tuple[dict[str, Any], list[str]]:
        """Validate the whole step. Returns ``(converted values, error messages)``."""
        if self.model is None:
            return {}, []
        raw = {f.name: _blank_to_none(self.current_value(form_data, f)) for f in self.fields}
        try:
            values = self.model.model_validate(raw)
        except ValidationError as exc:
            errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]
            return {}, errors
        return values.to_form_data(), []

    async def save(self, session: OnboardingSession, api: OnboardingApiClient, values: dict[str, Any]) -> bool:
        raise NotImplementedError

    def build_submit(self, session: OnboardingSession, api: OnboardingApiClient):
        """Submit handler for this step's StepGate."""

        async def on_submit(form_data: dict[str, Any]) -> bool:
            values, errors = self.validate(form_data)
            session.errors = errors
            if errors:
                logger.info("Step %s failed validation: %s", self.step_id, errors)
                return False
            session.wizard.update_form_data(values)
            return await self.save(session, api, values)

        return on_submit

    def attach(self, session: OnboardingSession, api: OnboardingApiClient) -> None:
        """Register this form's StepGate on ``session``."""
        session.add_gate(
            self.step_id,
            self.build_submit(session, api) if self.model is not None else None,
            title=self.title,
            description=self.description,
            next_label=self.next_label,
            show_back=self.show_back,
        )
