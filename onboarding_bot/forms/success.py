"""Step 4 — completion summary."""

from collections.abc import Mapping
from html import escape
from typing import Any

from onboarding_api.services.categories import category_display

from .base import StepForm


class OnboardingSuccess(StepForm):
    step_id = "success"
    indicator_title = "Complete"
    title = "Setup Complete"
    description = "Your business profile is ready"
    show_back = False

    def summary(self, form_data: Mapping[str, Any]) -> str:
        name = form_data.get("business_name") or form_data.get("name") or "Your Business"
        category = category_display(form_data.get("category")) or "Wellness Service"
        address = ", ".join(
            str(part) for part in (
                form_data.get("address"),
                form_data.get("city"),
                " ".join(str(p) for p in (form_data.get("state"), form_data.get("postal_code")) if p),
            ) if part
        )
        return (
            "🎉 Your business profile has been successfully created and is now ready "
            "to receive bookings.\n\n"
            f"🏢 <b>{escape(name)}</b>\n"
            f"🏷️ {escape(category)}\n"
            f"📍 {escape(address) or 'No address yet'}\n\n"
            "<b>Next steps</b>\n"
            "• Set up your detailed availability to begin accepting bookings.\n"
            "• Add payment information to receive payments from clients.\n"
            "• Review and customize your business profile from the dashboard."
        )
