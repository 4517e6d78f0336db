from __future__ import annotations

from aiogram import F, Router
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import Command, CommandStart
from aiogram.types import CallbackQuery, InlineKeyboardMarkup, Message

from splitwizard.config import Settings
from splitwizard.errors import TransitionBlocked
from splitwizard.keyboards import confirm_keyboard, screen_keyboard
from splitwizard.logging import get_logger
from splitwizard.models import Screen, SplitMode
from splitwizard.services.summary import (
    format_items_overview,
    format_person_summary,
    format_screen,
)
from splitwizard.state import ALL_BILLS, Session, SessionStore

basic_router = Router()

HOME_PROMPT = "Your progress will be lost. Are you sure you want to go home?"

HELP_TEXT = (
    "Bill Splitter\n\n"
    "Per Head Split: enter items, then people and what they paid. "
    "Everyone pays the same share.\n"
    "Individual Items Payment: enter people, then bills and items, then tick who had what.\n\n"
    "On entry screens send 'name,amount' lines to add rows.\n"
    "/import <lines> replaces the whole list\n"
    "/remove <n> deletes row n\n"
    "/start goes back to the beginning"
)


def build_view(session: Session, currency: str) -> tuple[str, InlineKeyboardMarkup]:
    wizard = session.wizard
    text = format_screen(wizard, currency, session.active_bill())

    if wizard.screen == Screen.RESULTS and wizard.mode == SplitMode.INDIVIDUAL_ITEMS:
        bill_id = None if session.items_preview == ALL_BILLS else session.items_preview
        text += "\n\nPreview Items\n" + format_items_overview(wizard.ledger, bill_id, currency)
        if session.preview_person_id:
            summary = format_person_summary(wizard.ledger, session.preview_person_id, currency)
            if summary is not None:
                text += "\n\n" + summary

    return text, screen_keyboard(session)


async def show_view(callback: CallbackQuery, session: Session, settings: Settings) -> None:
    session.pending_import = False
    if not callback.message:
        return
    text, keyboard = build_view(session, settings.currency_symbol)
    try:
        await callback.message.edit_text(text, reply_markup=keyboard)
    except TelegramBadRequest as exc:
        get_logger(__name__).debug("view.unchanged", error=str(exc))


async def answer_view(message: Message, session: Session, settings: Settings) -> None:
    text, keyboard = build_view(session, settings.currency_symbol)
    await message.answer(text, reply_markup=keyboard)


@basic_router.message(CommandStart())
async def cmd_start(message: Message, sessions: SessionStore, settings: Settings) -> None:
    user = message.from_user
    if not user:
        return

    session = sessions.get(user.id)
    if session.wizard.screen != Screen.MODE_SELECTION and session.wizard.has_user_input:
        await message.answer(HOME_PROMPT, reply_markup=confirm_keyboard("nav:home_confirm", "Yes, start over"))
        return

    session.reset()
    await answer_view(message, session, settings)


@basic_router.message(Command("help"))
async def cmd_help(message: Message) -> None:
    await message.answer(HELP_TEXT)


@basic_router.callback_query(F.data.startswith("mode:"))
async def cb_mode(callback: CallbackQuery, sessions: SessionStore, settings: Settings) -> None:
    session = sessions.get(callback.from_user.id)
    try:
        mode = SplitMode(callback.data.split(":", 1)[1])
        session.wizard.select_mode(mode)
    except (ValueError, TransitionBlocked) as exc:
        await callback.answer(str(exc), show_alert=True)
        return

    session.clear_view()
    await callback.answer()
    await show_view(callback, session, settings)


async def _advance(callback: CallbackQuery, session: Session, settings: Settings) -> None:
    try:
        session.wizard.advance()
    except TransitionBlocked as exc:
        await callback.answer(str(exc), show_alert=True)
        return

    if session.on_results():
        session.preview_person_id = None
        session.items_preview = ALL_BILLS
    await callback.answer()
    await show_view(callback, session, settings)


@basic_router.callback_query(F.data == "nav:next")
async def cb_next(callback: CallbackQuery, sessions: SessionStore, settings: Settings) -> None:
    session = sessions.get(callback.from_user.id)
    wizard = session.wizard

    if wizard.can_advance() and wizard.needs_confirmation():
        await callback.answer()
        if callback.message:
            await callback.message.edit_text(
                wizard.confirmation_prompt(),
                reply_markup=confirm_keyboard("nav:confirm", "Continue anyway"),
            )
        return

    await _advance(callback, session, settings)


@basic_router.callback_query(F.data == "nav:confirm")
async def cb_confirm(callback: CallbackQuery, sessions: SessionStore, settings: Settings) -> None:
    await _advance(callback, sessions.get(callback.from_user.id), settings)


@basic_router.callback_query(F.data == "nav:back")
async def cb_back(callback: CallbackQuery, sessions: SessionStore, settings: Settings) -> None:
    session = sessions.get(callback.from_user.id)
    session.wizard.back()
    await callback.answer()
    await show_view(callback, session, settings)


@basic_router.callback_query(F.data == "nav:stay")
async def cb_stay(callback: CallbackQuery, sessions: SessionStore, settings: Settings) -> None:
    await callback.answer()
    await show_view(callback, sessions.get(callback.from_user.id), settings)


@basic_router.callback_query(F.data == "nav:home")
async def cb_home(callback: CallbackQuery, sessions: SessionStore, settings: Settings) -> None:
    session = sessions.get(callback.from_user.id)
    await callback.answer()
    if session.wizard.has_user_input:
        if callback.message:
            await callback.message.edit_text(
                HOME_PROMPT,
                reply_markup=confirm_keyboard("nav:home_confirm", "Yes, start over"),
            )
        return

    session.reset()
    await show_view(callback, session, settings)


@basic_router.callback_query(F.data.in_({"nav:home_confirm", "nav:reset"}))
async def cb_reset(callback: CallbackQuery, sessions: SessionStore, settings: Settings) -> None:
    session = sessions.get(callback.from_user.id)
    session.reset()
    await callback.answer()
    await show_view(callback, session, settings)


@basic_router.callback_query(F.data.startswith("jump:"))
async def cb_jump(callback: CallbackQuery, sessions: SessionStore, settings: Settings) -> None:
    session = sessions.get(callback.from_user.id)
    try:
        screen = Screen(callback.data.split(":", 1)[1])
        session.wizard.jump_to(screen)
    except (ValueError, TransitionBlocked) as exc:
        await callback.answer(str(exc), show_alert=True)
        return

    await callback.answer()
    await show_view(callback, session, settings)
