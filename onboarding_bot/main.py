"""Bot entry point — polling dispatcher for the onboarding wizard."""

import asyncio
import logging

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties

from onboarding_bot.config import settings
from onboarding_bot.handlers import onboarding, start
from onboarding_bot.services.api_client import OnboardingApiClient
from onboarding_bot.wizard import WizardSessions

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


def build_dispatcher(api: OnboardingApiClient, sessions: WizardSessions | None = None) -> Dispatcher:
    """Dispatcher with the wizard dependencies in its workflow data."""
    dp = Dispatcher()
    dp["sessions"] = sessions if sessions is not None else WizardSessions()
    dp["api"] = api
    dp.include_router(start.router)
    dp.include_router(onboarding.router)
    return dp


async def run() -> None:
    bot = Bot(token=settings.TELEGRAM_BOT_TOKEN, default=DefaultBotProperties(parse_mode="HTML"))
    dp = build_dispatcher(OnboardingApiClient(settings.API_BASE_URL, timeout=settings.API_TIMEOUT))
    logger.info("🤖 Onboarding bot polling (API: %s)", settings.API_BASE_URL)
    try:
        await dp.start_polling(bot)
    finally:
        await bot.session.close()


def main() -> None:
    if not settings.TELEGRAM_BOT_TOKEN:
        raise RuntimeError("TELEGRAM_BOT_TOKEN is not set")
    asyncio.run(run())


if __name__ == "__main__":
    main()
