"""/start and /help."""

from html import escape

from aiogram import Router
from aiogram.filters import Command
from aiogram.types import Message

from onboarding_bot.keyboards.wizard_kb import start_keyboard

router = Router()


@router.message(Command("start"))
async def cmd_start(message: Message):
    """Welcome message with the onboarding entry point."""
    await message.answer(
        "━━━━━━━━━━━━━━━━━━━━━━\n"
        "🌿 <b>Set Up Your Business</b>\n"
        "━━━━━━━━━━━━━━━━━━━━━━\n\n"
        f"Hi <b>{escape(message.from_user.first_name)}</b>! 👋\n\n"
        "Complete a few short steps to create your wellness business profile.\n"
        "It takes about 3 minutes.",
        reply_markup=start_keyboard(),
    )


@router.message(Command("help"))
async def cmd_help(message: Message):
    await message.answer(
        "<b>Commands</b>\n"
        "/onboard — set up a new business\n"
        "/edit <code>business_id</code> — update an existing business\n"
        "/cancel — stop the current setup",
    )
