"""Tests for the onboarding chat handlers (Telegram objects mocked)."""

from unittest.mock import AsyncMock, MagicMock

import httpx

import pytest

from onboarding_bot.forms import ONBOARDING_FORMS, ONBOARDING_STEPS
from onboarding_bot.handlers import onboarding, start
from onboarding_bot.services.api_client import ApiError
from onboarding_bot.wizard import WizardSessions

USER_ID = 777


def _message(text=None):
    message = AsyncMock()
    message.from_user.id = USER_ID
    message.from_user.full_name = "Ada Owner"
    message.from_user.username = "ada"
    message.text = text
    return message


def _callback(data):
    callback = AsyncMock()
    callback.from_user.id = USER_ID
    callback.data = data
    return callback


def _session(sessions, api, initial_data=None):
    session = sessions.start(USER_ID, ONBOARDING_STEPS, {"owner_id": "owner-1", **(initial_data or {})})
    for form in ONBOARDING_FORMS:
        form.attach(session, api)
    return session


def _buttons(markup):
    return [button.callback_data for row in markup.inline_keyboard for button in row]


@pytest.mark.asyncio
async def test_active_wizard_filter():
    """The filter injects the user's session, or rejects users without one."""
    sessions = WizardSessions()
    wizard_filter = onboarding.ActiveWizard()
    message = _message("hi")

    assert await wizard_filter(message, sessions) is False

    session = _session(sessions, AsyncMock())
    assert await wizard_filter(message, sessions) == {"session": session}


@pytest.mark.asyncio
async def test_onboard_command_starts_wizard():
    """/onboard registers the owner and shows the first field prompt."""
    sessions = WizardSessions()
    api = AsyncMock()
    api.ensure_user.return_value = {"id": "owner-1"}
    message = _message("/onboard")

    await onboarding.cmd_onboard(message, sessions, api)

    api.ensure_user.assert_awaited_once_with(USER_ID, "Ada Owner", "ada")
    session = sessions.require(USER_ID)
    assert session.wizard.form_data["owner_id"] == "owner-1"
    text = message.answer.await_args.args[0]
    assert "Step 1/4" in text
    assert "business name" in text


@pytest.mark.asyncio
async def test_onboard_command_api_down():
    """If the owner cannot be registered, no session is started."""
    sessions = WizardSessions()
    api = AsyncMock()
    api.ensure_user.side_effect = ApiError(500, "boom")
    message = _message("/onboard")

    await onboarding.cmd_onboard(message, sessions, api)

    assert USER_ID not in sessions
    assert "Could not reach" in message.answer.await_args.args[0]


@pytest.mark.asyncio
async def test_text_answer_advances_field():
    """A valid answer is stored and the next field is prompted."""
    sessions = WizardSessions()
    session = _session(sessions, AsyncMock())
    message = _message("Lotus Touch Spa")

    await onboarding.field_text(message, session)

    assert session.wizard.form_data["business_name"] == "Lotus Touch Spa"
    assert session.field_index == 1
    markup = message.answer.await_args.kwargs["reply_markup"]
    assert "wiz_choice:category:touch" in _buttons(markup)


@pytest.mark.asyncio
async def test_invalid_text_answer_reprompts():
    """An invalid answer is rejected with the field's message and not stored."""
    session = _session(WizardSessions(), AsyncMock())
    message = _message("A")

    await onboarding.field_text(message, session)

    assert "at least 2 characters" in message.answer.await_args.args[0]
    assert "business_name" not in session.wizard.form_data
    assert session.field_index == 0


@pytest.mark.asyncio
async def test_choice_button_sets_category():
    """Choice buttons answer the current field."""
    session = _session(WizardSessions(), AsyncMock())
    session.field_index = 1
    callback = _callback("wiz_choice:category:sound")

    await onboarding.field_choice(callback, session)

    assert session.wizard.form_data["category"] == "sound"
    assert session.field_index == 2
    callback.message.edit_text.assert_awaited_once()


@pytest.mark.asyncio
async def test_skip_required_field_refused():
    """Required fields cannot be skipped."""
    session = _session(WizardSessions(), AsyncMock())
    callback = _callback("wiz_skip:business_name")

    await onboarding.field_keep_or_skip(callback, session)

    assert session.field_index == 0
    assert callback.answer.await_args.kwargs.get("show_alert") is True


@pytest.mark.asyncio
async def test_keep_default_records_it():
    """Keeping a shown default stores it as the answer."""
    session = _session(WizardSessions(), AsyncMock(), {"id": "biz-1"})
    session.wizard.go_to_step(1)
    session.field_index = 4  # country

    await onboarding.field_keep_or_skip(_callback("wiz_keep:country"), session)

    assert session.wizard.form_data["country"] == "United States"
    assert session.field_index == 5


@pytest.mark.asyncio
async def test_photo_answer_for_profile_image():
    """The profile image field stores the largest photo's file id."""
    session = _session(WizardSessions(), AsyncMock(), {"id": "biz-1"})
    session.wizard.go_to_step(2)
    message = _message()
    message.photo = [MagicMock(file_id="small"), MagicMock(file_id="large")]

    await onboarding.field_photo(message, session)

    assert session.wizard.form_data["profile_image"] == "large"
    assert session.field_index == 1


@pytest.mark.asyncio
async def test_review_card_after_last_field():
    """Once every field is answered the card offers submit and edit."""
    session = _session(WizardSessions(), AsyncMock())
    session.field_index = len(ONBOARDING_FORMS[0].fields)

    text, markup = onboarding.render_card(session)

    assert "Does everything look correct?" in text
    buttons = _buttons(markup)
    assert "wiz_submit" in buttons
    assert "wiz_edit" in buttons
    assert "wiz_back" not in buttons


@pytest.mark.asyncio
async def test_submit_success_moves_to_next_step():
    """A successful submit shows the next step's first prompt."""
    api = AsyncMock()
    api.save_basic_info.return_value = {"id": "biz-1"}
    session = _session(WizardSessions(), api, {
        "business_name": "Lotus Touch Spa",
        "category": "touch",
        "phone": "+1 555 123 4567",
        "email": "hello@lotus.example",
        "description": "Therapeutic massage and bodywork.",
    })
    callback = _callback("wiz_submit")

    await onboarding.submit_step(callback, session)

    assert session.wizard.current_step.id == "location-details"
    assert session.gates["basic-info"].is_submitting is False
    text = callback.message.edit_text.await_args.args[0]
    assert "Step 2/4" in text
    assert "street address" in text


@pytest.mark.asyncio
async def test_submit_failure_offers_retry():
    """A failed save keeps the step and shows Try Again."""
    api = AsyncMock()
    api.update_business.side_effect = ApiError(500, "Failed to save data")
    session = _session(WizardSessions(), api, {"id": "biz-1"})
    session.wizard.go_to_step(2)
    callback = _callback("wiz_submit")

    await onboarding.submit_step(callback, session)

    assert session.wizard.current_step.id == "profile-completion"
    text = callback.message.edit_text.await_args.args[0]
    markup = callback.message.edit_text.await_args.kwargs["reply_markup"]
    assert "Could not save this step" in text
    assert "wiz_submit" in _buttons(markup)


@pytest.mark.asyncio
async def test_submit_while_in_flight_is_ignored():
    """A second tap during a save does not submit again."""
    api = AsyncMock()
    session = _session(WizardSessions(), api)
    session.gate.is_submitting = True
    callback = _callback("wiz_submit")

    await onboarding.submit_step(callback, session)

    api.save_basic_info.assert_not_awaited()
    callback.answer.assert_awaited_once_with("⏳ Still saving…")


@pytest.mark.asyncio
async def test_back_button():
    """Back returns to the previous step's card."""
    session = _session(WizardSessions(), AsyncMock())
    session.wizard.go_to_step(1)
    callback = _callback("wiz_back")

    await onboarding.go_back(callback, session)

    assert session.wizard.current_step.id == "basic-info"
    callback.message.edit_text.assert_awaited_once()


@pytest.mark.asyncio
async def test_indicator_jump_to_future_step_refused():
    """Jumping ahead to an unfinished step is refused."""
    session = _session(WizardSessions(), AsyncMock())
    callback = _callback("wiz_goto_2")

    await onboarding.jump_to_step(callback, session)

    assert session.wizard.current_step_index == 0
    callback.message.edit_text.assert_not_awaited()


@pytest.mark.asyncio
async def test_indicator_jump_to_completed_step():
    """Completed steps can be revisited from the indicator."""
    session = _session(WizardSessions(), AsyncMock())
    session.wizard.mark_step_complete("basic-info")
    session.wizard.go_to_step(1)
    callback = _callback("wiz_goto_0")

    await onboarding.jump_to_step(callback, session)

    assert session.wizard.current_step.id == "basic-info"


@pytest.mark.asyncio
async def test_done_closes_session():
    """Done on the completion card ends the session."""
    sessions = WizardSessions()
    session = _session(sessions, AsyncMock(), {"id": "biz-1"})
    session.wizard.go_to_step(3)
    callback = _callback("wiz_done")

    await onboarding.finish(callback, session, sessions)

    assert USER_ID not in sessions
    assert session.wizard.is_step_complete("success")
    assert "biz-1" in callback.message.edit_text.await_args.args[0]


@pytest.mark.asyncio
async def test_cancel_discards_session():
    """/cancel drops the active session."""
    sessions = WizardSessions()
    _session(sessions, AsyncMock())

    await onboarding.cmd_cancel(_message("/cancel"), sessions)

    assert USER_ID not in sessions


def test_record_to_form_data():
    """Stored records seed both name keys and every step field."""
    data = onboarding.record_to_form_data({"id": "biz-1", "name": "Quiet Waves", "city": "Denver"})
    assert data["business_name"] == "Quiet Waves"
    assert data["name"] == "Quiet Waves"
    assert data["city"] == "Denver"
    assert data["capacity"] is None


@pytest.mark.asyncio
async def test_choice_from_older_card_is_refused():
    """A choice button for an earlier field does not answer the current one."""
    session = _session(WizardSessions(), AsyncMock(), {"id": "biz-1"})
    session.wizard.go_to_step(1)
    session.field_index = 8  # capacity
    callback = _callback("wiz_choice:service_radius:100")

    await onboarding.field_choice(callback, session)

    assert "capacity" not in session.wizard.form_data
    assert "service_radius" not in session.wizard.form_data
    assert session.field_index == 8
    assert callback.answer.await_args.kwargs.get("show_alert") is True
    callback.message.edit_text.assert_not_awaited()


@pytest.mark.asyncio
async def test_skip_from_older_card_is_refused():
    """Skip on an earlier optional field leaves the current field alone."""
    session = _session(WizardSessions(), AsyncMock(), {"id": "biz-1", "operating_hours_end": "18:00"})
    session.wizard.go_to_step(1)
    session.field_index = 7  # operating_hours_end

    await onboarding.field_keep_or_skip(_callback("wiz_skip:operating_hours_start"), session)

    assert session.wizard.form_data["operating_hours_end"] == "18:00"
    assert session.field_index == 7


@pytest.mark.asyncio
async def test_skip_optional_field():
    """Skip clears the optional field it was shown for and moves on."""
    session = _session(WizardSessions(), AsyncMock(), {"id": "biz-1"})
    session.wizard.go_to_step(1)
    session.field_index = 5  # service_radius

    await onboarding.field_keep_or_skip(_callback("wiz_skip:service_radius"), session)

    assert session.wizard.form_data["service_radius"] is None
    assert session.field_index == 6


def test_field_buttons_name_their_field():
    """Choice, keep and skip buttons carry the field they answer."""
    session = _session(WizardSessions(), AsyncMock(), {"id": "biz-1", "service_radius": "10"})
    session.wizard.go_to_step(1)
    session.field_index = 5

    _, markup = onboarding.render_card(session)
    buttons = _buttons(markup)

    assert "wiz_choice:service_radius:50" in buttons
    assert "wiz_keep:service_radius" in buttons
    assert "wiz_skip:service_radius" in buttons


# ── /edit ─────────────────────────────────────────────────

def _edit_api(record=None, owner_id="owner-1"):
    api = AsyncMock()
    api.ensure_user.return_value = {"id": owner_id}
    if record is not None:
        api.get_business.return_value = record
    return api


@pytest.mark.asyncio
async def test_edit_seeds_session_from_record():
    """/edit opens the wizard on the stored business, keeping its id."""
    sessions = WizardSessions()
    api = _edit_api({"id": "biz-1", "owner_id": "owner-1", "name": "Quiet Waves", "city": "Denver"})
    message = _message("/edit biz-1")

    await onboarding.cmd_edit(message, MagicMock(args="biz-1"), sessions, api)

    session = sessions.require(USER_ID)
    assert session.wizard.form_data["id"] == "biz-1"
    assert session.wizard.form_data["business_name"] == "Quiet Waves"
    assert "Quiet Waves" in message.answer.await_args.args[0]


@pytest.mark.asyncio
async def test_edit_later_step_updates_same_record():
    """Steps saved after /edit patch the business that was loaded."""
    sessions = WizardSessions()
    api = _edit_api({
        "id": "biz-1", "owner_id": "owner-1", "name": "Quiet Waves",
        "address": "12 Harbor Street", "city": "Denver", "state": "Colorado",
        "postal_code": "80202", "country": "United States",
    })
    api.update_business.return_value = {"id": "biz-1"}

    await onboarding.cmd_edit(_message("/edit biz-1"), MagicMock(args="biz-1"), sessions, api)
    session = sessions.require(USER_ID)
    session.wizard.go_to_step(1)

    assert await session.gate.submit() is True
    assert api.update_business.await_args.args[0] == "biz-1"
    api.save_basic_info.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [404, 422])
async def test_edit_unknown_business(status):
    """Missing or malformed ids are reported as not found."""
    sessions = WizardSessions()
    api = _edit_api()
    api.get_business.side_effect = ApiError(status, "Business not found")
    message = _message("/edit nope")

    await onboarding.cmd_edit(message, MagicMock(args="nope"), sessions, api)

    assert USER_ID not in sessions
    assert "Business not found" in message.answer.await_args.args[0]


@pytest.mark.asyncio
async def test_edit_api_down():
    """Transport failures get the server-unreachable reply."""
    sessions = WizardSessions()
    api = _edit_api()
    api.get_business.side_effect = httpx.ConnectError("refused")
    message = _message("/edit biz-1")

    await onboarding.cmd_edit(message, MagicMock(args="biz-1"), sessions, api)

    assert USER_ID not in sessions
    assert "Could not reach" in message.answer.await_args.args[0]


@pytest.mark.asyncio
async def test_edit_someone_elses_business():
    """Users cannot open a business owned by another account."""
    sessions = WizardSessions()
    api = _edit_api({"id": "biz-1", "owner_id": "owner-2", "name": "Not Yours"}, owner_id="owner-1")
    message = _message("/edit biz-1")

    await onboarding.cmd_edit(message, MagicMock(args="biz-1"), sessions, api)

    assert USER_ID not in sessions
    assert "Business not found" in message.answer.await_args.args[0]


@pytest.mark.asyncio
async def test_edit_without_id():
    """/edit alone shows usage."""
    api = _edit_api()
    message = _message("/edit")

    await onboarding.cmd_edit(message, MagicMock(args=None), WizardSessions(), api)

    assert "Usage" in message.answer.await_args.args[0]
    api.get_business.assert_not_awaited()


@pytest.mark.asyncio
async def test_stale_button_after_session_ended():
    """Buttons from a finished wizard get an alert instead of doing anything."""
    callback = _callback("wiz_submit")

    await onboarding.stale_button(callback)

    args, kwargs = callback.answer.await_args
    assert "session has ended" in args[0]
    assert kwargs["show_alert"] is True


@pytest.mark.asyncio
async def test_start_escapes_first_name():
    """User names are HTML-escaped in the greeting."""
    message = _message("/start")
    message.from_user.first_name = "<Ada & Co>"

    await start.cmd_start(message)

    text = message.answer.await_args.args[0]
    assert "&lt;Ada &amp; Co&gt;" in text
    assert "<Ada" not in text
