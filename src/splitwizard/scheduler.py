from __future__ import annotations

from datetime import datetime, timedelta, timezone

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from splitwizard.config import Settings
from splitwizard.keyboards import results_keyboard
from splitwizard.logging import get_logger
from splitwizard.state import Session


async def setup_scheduler(settings: Settings) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(timezone=settings.zoneinfo)
    scheduler.start()
    return scheduler


def schedule_copied_reset(
    scheduler: AsyncIOScheduler,
    bot: Bot,
    session: Session,
    chat_id: int,
    message_id: int,
    delay_seconds: float,
) -> None:
    run_at = datetime.now(timezone.utc) + timedelta(seconds=delay_seconds)
    scheduler.add_job(
        _copied_reset_job,
        DateTrigger(run_date=run_at),
        kwargs={"bot": bot, "session": session, "chat_id": chat_id, "message_id": message_id},
    )


async def _copied_reset_job(bot: Bot, session: Session, chat_id: int, message_id: int) -> None:
    log = get_logger(__name__)
    if not session.copied:
        return
    session.copied = False
    if not session.on_results():
        return

    try:
        await bot.edit_message_reply_markup(
            chat_id=chat_id,
            message_id=message_id,
            reply_markup=results_keyboard(session),
        )
    except TelegramAPIError as exc:
        log.warning("export.copied_reset_failed", chat_id=chat_id, error=str(exc))
