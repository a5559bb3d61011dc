"""
Onboarding Bot Handler — business setup wizard.

Flow:
  1. Basic Info → 2. Location → 3. Profile → 4. Complete

Each step is a "step card" message: progress bar, the current field prompt,
and an inline keyboard carrying the step indicator, choice buttons and the
back/submit controls. Answers are merged into the wizard's form data as they
arrive; the step's StepGate saves and advances once every field is answered.
"""

import logging
from html import escape

import httpx
from aiogram import Router, F
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import Command, CommandObject, Filter
from aiogram.types import CallbackQuery, InlineKeyboardMarkup, Message, User

from onboarding_bot.forms import FORMS_BY_STEP, ONBOARDING_FORMS, ONBOARDING_STEPS, OnboardingSuccess, StepForm
from onboarding_bot.keyboards.wizard_kb import (
    CHOICE_PREFIX,
    GOTO_PREFIX,
    KEEP_PREFIX,
    SKIP_PREFIX,
    field_keyboard,
    progress_bar,
    retry_keyboard,
    review_keyboard,
    success_keyboard,
)
from onboarding_bot.services.api_client import ApiError, OnboardingApiClient
from onboarding_bot.wizard import OnboardingSession, WizardSessions

router = Router()
logger = logging.getLogger(__name__)

# Business record keys that map straight onto form data when resuming an edit
RECORD_FIELDS = (
    "id", "description", "category", "phone", "email",
    "address", "city", "state", "postal_code", "country",
    "service_radius", "operating_hours_start", "operating_hours_end", "capacity",
    "profile_image", "certifications", "promotional_text", "years_in_business",
)


class ActiveWizard(Filter):
    """Matches users with an onboarding session and injects it as ``session``."""

    async def __call__(self, event: Message | CallbackQuery, sessions: WizardSessions) -> bool | dict:
        user_id = event.from_user.id
        if user_id not in sessions:
            return False
        return {"session": sessions.require(user_id)}


async def safe_edit(callback: CallbackQuery, text: str, **kwargs):
    """Edit message, silently ignoring 'message not modified' errors."""
    try:
        await callback.message.edit_text(text, **kwargs)
    except TelegramBadRequest as e:
        if "message is not modified" not in str(e):
            raise


# ── Rendering ─────────────────────────────────────────────

def _current_form(session: OnboardingSession) -> StepForm:
    return FORMS_BY_STEP[session.wizard.current_step.id]


def _display(value) -> str:
    if value in (None, ""):
        return "—"
    return escape(str(value))


def _header(session: OnboardingSession) -> str:
    wizard = session.wizard
    gate = session.gate
    return (
        f"{progress_bar(session.indicator.progress())}\n"
        f"<b>Step {wizard.current_step_index + 1}/{len(wizard.steps)}:</b> {escape(gate.display_title)}\n"
        f"<i>{escape(gate.display_description)}</i>\n\n"
    )


def render_card(session: OnboardingSession) -> tuple[str, InlineKeyboardMarkup]:
    """Text and keyboard for the current step."""
    form = _current_form(session)
    form_data = session.wizard.form_data
    header = _header(session)

    if isinstance(form, OnboardingSuccess):
        return header + form.summary(form_data), success_keyboard()

    form_field = form.field_at(session.field_index)
    if form_field is None:
        lines = []
        for f in form.fields:
            value = form.current_value(form_data, f)
            if f.accepts_photo:
                value = "📷 Uploaded" if value else None
            lines.append(f"• <b>{f.label}:</b> {_display(value)}")
        return header + "\n".join(lines) + "\n\nDoes everything look correct?", review_keyboard(session)

    value = form.current_value(form_data, form_field)
    text = header + form_field.prompt
    if value not in (None, ""):
        shown = "📷 Photo uploaded" if form_field.accepts_photo else f"<code>{escape(str(value))}</code>"
        text += f"\n\nCurrent: {shown}"
    return text, field_keyboard(session, form_field, has_value=value not in (None, ""))


def render_failure(session: OnboardingSession) -> tuple[str, InlineKeyboardMarkup]:
    details = "\n".join(f"• {escape(error)}" for error in session.errors) or (
        "There was an error saving this step. Please try again."
    )
    return (
        _header(session) + "⚠️ <b>Could not save this step</b>\n\n" + details,
        retry_keyboard(session),
    )


# ── Session setup ─────────────────────────────────────────

async def open_session(
    user: User,
    sessions: WizardSessions,
    api: OnboardingApiClient,
    initial_data: dict | None = None,
    owner: dict | None = None,
) -> OnboardingSession:
    """Ensure the owner exists, then start a wizard with every step's gate attached."""
    if owner is None:
        owner = await api.ensure_user(user.id, user.full_name, user.username)
    session = sessions.start(user.id, ONBOARDING_STEPS, {"owner_id": owner["id"], **(initial_data or {})})
    for form in ONBOARDING_FORMS:
        form.attach(session, api)
    return session


def record_to_form_data(record: dict) -> dict:
    """Seed form data from a stored business so the wizard edits it in place."""
    data = {key: record.get(key) for key in RECORD_FIELDS}
    data["business_name"] = data["name"] = record.get("name")
    return data


# ── Entry points ──────────────────────────────────────────

@router.message(Command("onboard"))
async def cmd_onboard(message: Message, sessions: WizardSessions, api: OnboardingApiClient):
    """Begin the onboarding wizard."""
    try:
        session = await open_session(message.from_user, sessions, api)
    except (ApiError, httpx.HTTPError):
        logger.exception("Could not start onboarding: telegram_id=%s", message.from_user.id)
        await message.answer("⚠️ Could not reach the onboarding server. Please try again later.")
        return

    text, kb = render_card(session)
    await message.answer(text, reply_markup=kb)


@router.callback_query(F.data == "start_onboarding")
async def start_onboarding(callback: CallbackQuery, sessions: WizardSessions, api: OnboardingApiClient):
    """Begin the onboarding wizard from the /start button."""
    await callback.answer()
    try:
        session = await open_session(callback.from_user, sessions, api)
    except (ApiError, httpx.HTTPError):
        logger.exception("Could not start onboarding: telegram_id=%s", callback.from_user.id)
        await safe_edit(callback, "⚠️ Could not reach the onboarding server. Please try again later.")
        return

    text, kb = render_card(session)
    await safe_edit(callback, text, reply_markup=kb)


@router.message(Command("edit"))
async def cmd_edit(message: Message, command: CommandObject, sessions: WizardSessions, api: OnboardingApiClient):
    """Re-open the wizard on an existing business, seeded with its stored values."""
    business_id = (command.args or "").strip()
    if not business_id:
        await message.answer("Usage: /edit <code>business_id</code>")
        return

    user = message.from_user
    try:
        owner = await api.ensure_user(user.id, user.full_name, user.username)
        record = await api.get_business(business_id)
        if str(record.get("owner_id")) != str(owner["id"]):
            logger.warning("Edit refused: telegram_id=%s does not own business %s", user.id, business_id)
            await message.answer("⚠️ Business not found.")
            return
        session = await open_session(user, sessions, api, record_to_form_data(record), owner=owner)
    except ApiError as e:
        if e.status_code in (404, 422):
            await message.answer("⚠️ Business not found.")
            return
        logger.exception("Could not load business %s", business_id)
        await message.answer("⚠️ Could not reach the onboarding server. Please try again later.")
        return
    except httpx.HTTPError:
        logger.exception("Could not load business %s", business_id)
        await message.answer("⚠️ Could not reach the onboarding server. Please try again later.")
        return

    text, kb = render_card(session)
    await message.answer(text, reply_markup=kb)


@router.message(Command("cancel"), ActiveWizard())
async def cmd_cancel(message: Message, sessions: WizardSessions):
    sessions.discard(message.from_user.id)
    await message.answer("❌ Setup cancelled. Send /onboard to start again.")


# ── Field answers ─────────────────────────────────────────

@router.message(ActiveWizard(), F.photo)
async def field_photo(message: Message, session: OnboardingSession):
    """Photo answer — only accepted by photo fields."""
    form = _current_form(session)
    form_field = form.field_at(session.field_index)
    if form_field is None or not form_field.accepts_photo:
        await message.answer("⚠️ Please answer with text.")
        return

    form.accept(session, form_field, message.photo[-1].file_id)
    session.field_index += 1
    text, kb = render_card(session)
    await message.answer(text, reply_markup=kb)


@router.message(ActiveWizard(), F.text)
async def field_text(message: Message, session: OnboardingSession):
    """Text answer for the current field."""
    form = _current_form(session)
    form_field = form.field_at(session.field_index)
    if form_field is None:
        text, kb = render_card(session)
        await message.answer("👇 Tap a button below to continue.\n\n" + text, reply_markup=kb)
        return

    if form_field.accepts_photo:
        await message.answer("⚠️ Please send a <b>photo</b>, or tap Skip.")
        return

    error = form.accept(session, form_field, message.text)
    if error:
        await message.answer(error)
        return

    session.field_index += 1
    text, kb = render_card(session)
    await message.answer(text, reply_markup=kb)


# ── Step card buttons ─────────────────────────────────────

async def _refuse_while_saving(callback: CallbackQuery, session: OnboardingSession) -> bool:
    if session.gate.is_submitting:
        await callback.answer("⏳ Still saving…")
        return True
    return False


async def _field_for_button(callback: CallbackQuery, session: OnboardingSession, field_name: str):
    """Current form and field, or None when the button belongs to an older prompt."""
    form = _current_form(session)
    form_field = form.field_at(session.field_index)
    if form_field is None or form_field.name != field_name:
        logger.info("Ignoring answer for %s; current field is %s", field_name, form_field and form_field.name)
        await callback.answer("This question was already answered. Use the latest message.", show_alert=True)
        return None
    return form, form_field


@router.callback_query(ActiveWizard(), F.data.startswith(CHOICE_PREFIX))
async def field_choice(callback: CallbackQuery, session: OnboardingSession):
    if await _refuse_while_saving(callback, session):
        return
    field_name, _, value = callback.data[len(CHOICE_PREFIX):].partition(":")
    found = await _field_for_button(callback, session, field_name)
    if found is None:
        return
    form, form_field = found

    error = form.accept(session, form_field, value)
    if error:
        await callback.answer(error, show_alert=True)
        return

    await callback.answer()
    session.field_index += 1
    text, kb = render_card(session)
    await safe_edit(callback, text, reply_markup=kb)


@router.callback_query(ActiveWizard(), F.data.startswith((KEEP_PREFIX, SKIP_PREFIX)))
async def field_keep_or_skip(callback: CallbackQuery, session: OnboardingSession):
    """Keep the shown value, or clear an optional field."""
    if await _refuse_while_saving(callback, session):
        return
    action, _, field_name = callback.data.partition(":")
    found = await _field_for_button(callback, session, field_name)
    if found is None:
        return
    _, form_field = found

    if action + ":" == SKIP_PREFIX:
        if form_field.required:
            await callback.answer(f"{form_field.label} is required.", show_alert=True)
            return
        session.wizard.update_form_data({form_field.name: None})
    elif form_field.name not in session.wizard.form_data:
        # Keeping a default makes it an explicit answer
        session.wizard.update_form_data({form_field.name: form_field.default})

    await callback.answer()
    session.field_index += 1
    text, kb = render_card(session)
    await safe_edit(callback, text, reply_markup=kb)


@router.callback_query(ActiveWizard(), F.data == "wiz_edit")
async def edit_step(callback: CallbackQuery, session: OnboardingSession):
    """Walk through the current step's fields again."""
    if await _refuse_while_saving(callback, session):
        return
    await callback.answer()
    session.field_index = 0
    session.errors = []
    text, kb = render_card(session)
    await safe_edit(callback, text, reply_markup=kb)


@router.callback_query(ActiveWizard(), F.data == "wiz_back")
async def go_back(callback: CallbackQuery, session: OnboardingSession):
    if not session.gate.go_back():
        await callback.answer("You can't go back right now.")
        return
    await callback.answer()
    text, kb = render_card(session)
    await safe_edit(callback, text, reply_markup=kb)


@router.callback_query(ActiveWizard(), F.data.startswith(GOTO_PREFIX))
async def jump_to_step(callback: CallbackQuery, session: OnboardingSession):
    """Indicator jump to a past or completed step."""
    if await _refuse_while_saving(callback, session):
        return
    try:
        index = int(callback.data[len(GOTO_PREFIX):])
    except ValueError:
        await callback.answer()
        return

    if not session.indicator.select(index):
        await callback.answer("That step isn't available yet.")
        return

    await callback.answer()
    text, kb = render_card(session)
    await safe_edit(callback, text, reply_markup=kb)


@router.callback_query(ActiveWizard(), F.data == "wiz_submit")
async def submit_step(callback: CallbackQuery, session: OnboardingSession):
    """Save the current step and advance on success."""
    gate = session.gate
    if not gate.can_submit:
        await callback.answer("⏳ Still saving…")
        return

    await callback.answer("Saving…")
    gate.is_submitting = True
    try:
        completed = await gate.submit()
    finally:
        gate.is_submitting = False

    text, kb = render_card(session) if completed else render_failure(session)
    await safe_edit(callback, text, reply_markup=kb)


@router.callback_query(ActiveWizard(), F.data == "wiz_done")
async def finish(callback: CallbackQuery, session: OnboardingSession, sessions: WizardSessions):
    """Close the wizard from the completion card."""
    await callback.answer("All done!")
    await session.gate.submit()
    logger.info(
        "Onboarding finished: telegram_id=%s, business_id=%s",
        callback.from_user.id,
        session.wizard.form_data.get("id"),
    )
    sessions.discard(callback.from_user.id)
    business_id = escape(str(session.wizard.form_data.get("id") or ""))
    await safe_edit(
        callback,
        f"✅ <b>All set!</b>\n\nSend /edit <code>{business_id}</code> any time to update your business.",
    )


@router.callback_query(ActiveWizard(), F.data == "wiz_noop")
async def inert_marker(callback: CallbackQuery):
    await callback.answer()


@router.callback_query(F.data.startswith("wiz_"))
async def stale_button(callback: CallbackQuery):
    """Buttons from a finished or cancelled wizard."""
    await callback.answer(
        "⌛ This setup session has ended. Send /onboard to start again.",
        show_alert=True,
    )
