from __future__ import annotations

from aiogram import Bot, F, Router
from aiogram.exceptions import TelegramAPIError, TelegramBadRequest
from aiogram.types import CallbackQuery
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from splitwizard.config import Settings
from splitwizard.errors import SplitError
from splitwizard.handlers.basic import show_view
from splitwizard.keyboards import results_keyboard
from splitwizard.logging import get_logger
from splitwizard.models import AssignableItem, Collection
from splitwizard.scheduler import schedule_copied_reset
from splitwizard.services.summary import format_person_summary
from splitwizard.state import ALL_BILLS, SessionStore

results_router = Router()


@results_router.callback_query(F.data.startswith("assign:"))
async def cb_assign(callback: CallbackQuery, sessions: SessionStore, settings: Settings) -> None:
    session = sessions.get(callback.from_user.id)
    _, item_id, person_id = callback.data.split(":")
    try:
        ledger = session.wizard.edit(Collection.ASSIGNMENTS)
    except SplitError as exc:
        await callback.answer(str(exc), show_alert=True)
        return

    ledger.toggle_included(item_id, person_id)
    await callback.answer()
    await show_view(callback, session, settings)


@results_router.callback_query(F.data.startswith("assign_all:"))
async def cb_assign_all(callback: CallbackQuery, sessions: SessionStore, settings: Settings) -> None:
    session = sessions.get(callback.from_user.id)
    _, item_id = callback.data.split(":")
    try:
        ledger = session.wizard.edit(Collection.ASSIGNMENTS)
    except SplitError as exc:
        await callback.answer(str(exc), show_alert=True)
        return

    item = ledger.get_item(item_id)
    if isinstance(item, AssignableItem):
        people = ledger.valid_people()
        everyone = bool(people) and all(person.id in item.included_people for person in people)
        ledger.select_all_people(item_id, not everyone)
    await callback.answer()
    await show_view(callback, session, settings)


@results_router.callback_query(F.data.startswith("bills:"))
async def cb_bills(callback: CallbackQuery, sessions: SessionStore, settings: Settings) -> None:
    session = sessions.get(callback.from_user.id)
    if not session.on_results():
        await callback.answer()
        return
    _, bill_id = callback.data.split(":", 1)
    ledger = session.wizard.ledger
    session.items_preview = bill_id if ledger.get_bill(bill_id) is not None else ALL_BILLS
    await callback.answer()
    await show_view(callback, session, settings)


@results_router.callback_query(F.data.startswith("preview:"))
async def cb_preview(callback: CallbackQuery, sessions: SessionStore, settings: Settings) -> None:
    session = sessions.get(callback.from_user.id)
    if not session.on_results():
        await callback.answer()
        return
    _, person_id = callback.data.split(":", 1)
    person = session.wizard.ledger.get_person(person_id)
    if person is None or not person.is_valid():
        await callback.answer("Person not found", show_alert=True)
        return

    session.preview_person_id = person_id
    session.copied = False
    await callback.answer()
    await show_view(callback, session, settings)


@results_router.callback_query(F.data.startswith("copy:"))
async def cb_copy(
    callback: CallbackQuery,
    bot: Bot,
    sessions: SessionStore,
    settings: Settings,
    scheduler: AsyncIOScheduler,
) -> None:
    log = get_logger(__name__)
    session = sessions.get(callback.from_user.id)
    if not session.on_results() or not callback.message:
        await callback.answer()
        return
    _, person_id = callback.data.split(":", 1)
    person = session.wizard.ledger.get_person(person_id)
    if person is None or not person.is_valid():
        await callback.answer("Person not found", show_alert=True)
        return
    text = format_person_summary(session.wizard.ledger, person_id, settings.currency_symbol)
    if text is None:
        await callback.answer("Person not found", show_alert=True)
        return

    try:
        await callback.message.answer(text)
    except TelegramAPIError as exc:
        log.error("export.copy_failed", person_id=person_id, error=str(exc))
        await callback.answer("Failed to copy summary")
        return

    session.copied = True
    try:
        await callback.message.edit_reply_markup(reply_markup=results_keyboard(session))
    except TelegramBadRequest as exc:
        log.debug("view.unchanged", error=str(exc))

    log.info("export.copied", person_id=person_id)
    await callback.answer("Copied!")
    schedule_copied_reset(
        scheduler,
        bot,
        session,
        chat_id=callback.message.chat.id,
        message_id=callback.message.message_id,
        delay_seconds=settings.copied_reset_seconds,
    )
