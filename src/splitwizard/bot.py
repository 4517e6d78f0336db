from __future__ import annotations

import asyncio

from aiogram import Bot, Dispatcher

from splitwizard.config import get_settings
from splitwizard.handlers import basic_router, entry_router, results_router
from splitwizard.logging import configure_logging, get_logger
from splitwizard.scheduler import setup_scheduler
from splitwizard.state import SessionStore


async def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    bot = Bot(token=settings.bot_token)
    scheduler = await setup_scheduler(settings)
    dp = Dispatcher(sessions=SessionStore(), settings=settings, scheduler=scheduler)

    dp.include_router(basic_router)
    dp.include_router(results_router)
    dp.include_router(entry_router)

    log = get_logger(__name__)
    log.info("bot.start")
    try:
        await dp.start_polling(bot)
    finally:
        scheduler.shutdown(wait=False)
        await bot.session.close()
        log.info("bot.stop")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
