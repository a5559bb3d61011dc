"""Inline keyboard builders for the onboarding wizard."""

from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton

from onboarding_bot.forms import FormField
from onboarding_bot.wizard import OnboardingSession, StepGate, StepIndicator, StepMarker

GOTO_PREFIX = "wiz_goto_"
CHOICE_PREFIX = "wiz_choice:"
KEEP_PREFIX = "wiz_keep:"
SKIP_PREFIX = "wiz_skip:"


def progress_bar(fraction: float, width: int = 10) -> str:
    """``0.66`` → ``▰▰▰▰▰▰▰▱▱▱ 66%``."""
    filled = round(fraction * width)
    return f"{'▰' * filled}{'▱' * (width - filled)} {int(fraction * 100)}%"


def marker_button(marker: StepMarker) -> InlineKeyboardButton:
    """One indicator marker; inert unless it can be jumped to."""
    if marker.is_active:
        badge = "🔵"
    elif marker.is_complete:
        badge = "✅"
    elif marker.is_past:
        badge = "◽"
    else:
        badge = f"{marker.index + 1}."
    callback = f"{GOTO_PREFIX}{marker.index}" if marker.is_clickable and not marker.is_active else "wiz_noop"
    return InlineKeyboardButton(text=f"{badge} {marker.step.title}", callback_data=callback)


def indicator_rows(indicator: StepIndicator, per_row: int = 2) -> list[list[InlineKeyboardButton]]:
    buttons = [marker_button(marker) for marker in indicator.markers()]
    return [buttons[i:i + per_row] for i in range(0, len(buttons), per_row)]


def _back_row(gate: StepGate) -> list[list[InlineKeyboardButton]]:
    if not gate.can_go_back:
        return []
    return [[InlineKeyboardButton(text=f"⬅️ {gate.back_label}", callback_data="wiz_back")]]


def field_keyboard(session: OnboardingSession, form_field: FormField, has_value: bool) -> InlineKeyboardMarkup:
    """
    Indicator, choices, skip/keep and back controls for one field prompt.

    Answer buttons carry the field name so a press on an older card cannot
    answer whichever field is current now.
    """
    rows = indicator_rows(session.indicator)

    for value, label in form_field.choices:
        rows.append([InlineKeyboardButton(text=label, callback_data=f"{CHOICE_PREFIX}{form_field.name}:{value}")])

    controls = []
    if has_value:
        controls.append(InlineKeyboardButton(text="✔️ Keep", callback_data=f"{KEEP_PREFIX}{form_field.name}"))
    if not form_field.required:
        controls.append(InlineKeyboardButton(text="⏩ Skip", callback_data=f"{SKIP_PREFIX}{form_field.name}"))
    if controls:
        rows.append(controls)

    rows.extend(_back_row(session.gate))
    return InlineKeyboardMarkup(inline_keyboard=rows)


def review_keyboard(session: OnboardingSession) -> InlineKeyboardMarkup:
    """Shown once every field of the step is answered."""
    gate = session.gate
    rows = indicator_rows(session.indicator)
    rows.append([
        InlineKeyboardButton(text=f"✅ {gate.submit_label}", callback_data="wiz_submit"),
        InlineKeyboardButton(text="✏️ Edit", callback_data="wiz_edit"),
    ])
    rows.extend(_back_row(gate))
    return InlineKeyboardMarkup(inline_keyboard=rows)


def retry_keyboard(session: OnboardingSession) -> InlineKeyboardMarkup:
    gate = session.gate
    rows = [
        [InlineKeyboardButton(text="🔄 Try Again", callback_data="wiz_submit")],
        [InlineKeyboardButton(text="✏️ Edit Details", callback_data="wiz_edit")],
    ]
    rows.extend(_back_row(gate))
    return InlineKeyboardMarkup(inline_keyboard=rows)


def success_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="🏁 Done", callback_data="wiz_done")],
    ])


def start_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="🏢 Set Up Your Business", callback_data="start_onboarding")],
    ])
