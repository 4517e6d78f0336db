from __future__ import annotations

from typing import Optional

from aiogram import F, Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message

from splitwizard.config import Settings
from splitwizard.errors import SplitError
from splitwizard.handlers.basic import answer_view
from splitwizard.logging import get_logger
from splitwizard.models import Collection, Item, Screen
from splitwizard.services.importer import import_items, import_people
from splitwizard.services.ledger import Ledger
from splitwizard.services.summary import SCAN_RECEIPT_STUB
from splitwizard.state import Session, SessionStore
from splitwizard.utils.parse import parse_index, parse_pairs

entry_router = Router()

NOTHING_TO_EDIT = "Nothing to type in on this screen. Use the buttons below the last message."
ROW_FORMAT_HINT = "Send one 'name,amount' pair per line, e.g. 'John,300'."


def _screen_collection(session: Session) -> Optional[Collection]:
    screen = session.wizard.screen
    if screen in (Screen.ITEMS, Screen.BILL):
        return Collection.ITEMS
    if screen == Screen.PEOPLE:
        return Collection.PEOPLE
    return None


def _is_blank_item(item: Item) -> bool:
    return not item.name.strip() and item.price == 0


def fill_rows(session: Session, collection: Collection, rows: list[tuple[str, float]]) -> None:
    """Add rows to the open collection, reusing blank placeholder rows first."""
    ledger = session.wizard.edit(collection)
    if collection == Collection.PEOPLE:
        for name, contribution in rows:
            person = next((p for p in ledger.people if not p.name.strip() and p.contribution == 0), None)
            if person is None:
                person = ledger.add_person()
            ledger.update_person(person.id, name=name, contribution=contribution)
        return

    bill_id = session.active_bill()
    for name, price in rows:
        item = next(
            (i for i in ledger.items if _is_blank_item(i) and getattr(i, "bill_id", None) == bill_id),
            None,
        )
        if item is None:
            item = ledger.add_item(bill_id)
        ledger.update_item(item.id, name=name, price=price)


def import_rows(session: Session, collection: Collection, text: str) -> int:
    ledger = session.wizard.edit(collection)
    if collection == Collection.PEOPLE:
        return import_people(ledger, text)
    return import_items(ledger, text)


def _open_bills(session: Session) -> Ledger:
    return session.wizard.edit(Collection.BILLS)


@entry_router.message(Command("import"))
async def cmd_import(
    message: Message,
    command: CommandObject,
    sessions: SessionStore,
    settings: Settings,
) -> None:
    user = message.from_user
    if not user:
        return
    session = sessions.get(user.id)
    collection = _screen_collection(session)
    if collection is None:
        await message.answer(NOTHING_TO_EDIT)
        return

    if not command.args:
        session.pending_import = True
        await message.answer("Paste the rows to import, one 'name,amount' pair per line.")
        return

    await _import(message, session, settings, collection, command.args)


async def _import(
    message: Message,
    session: Session,
    settings: Settings,
    collection: Collection,
    text: str,
) -> None:
    session.pending_import = False
    try:
        count = import_rows(session, collection, text)
    except SplitError as exc:
        await message.answer(str(exc))
        return
    await message.answer(f"Imported {count} {collection.value}.")
    await answer_view(message, session, settings)


@entry_router.message(Command("remove"))
async def cmd_remove(message: Message, sessions: SessionStore, settings: Settings) -> None:
    user = message.from_user
    if not user or not message.text:
        return
    session = sessions.get(user.id)
    collection = _screen_collection(session)
    index = parse_index(message.text)
    if collection is None:
        await message.answer(NOTHING_TO_EDIT)
        return
    if index is None:
        await message.answer("Usage: /remove <row number>")
        return

    try:
        ledger = session.wizard.edit(collection)
    except SplitError as exc:
        await message.answer(str(exc))
        return

    rows = ledger.people if collection == Collection.PEOPLE else ledger.items
    if index <= len(rows):
        if collection == Collection.PEOPLE:
            ledger.remove_person(rows[index - 1].id)
        else:
            ledger.remove_item(rows[index - 1].id)
    await answer_view(message, session, settings)


@entry_router.message(Command("addbill"))
async def cmd_addbill(
    message: Message,
    command: CommandObject,
    sessions: SessionStore,
    settings: Settings,
) -> None:
    user = message.from_user
    if not user:
        return
    session = sessions.get(user.id)
    try:
        ledger = _open_bills(session)
    except SplitError as exc:
        await message.answer(str(exc))
        return

    bill = ledger.add_bill()
    if command.args and command.args.strip():
        ledger.rename_bill(bill.id, command.args.strip())
    session.active_bill_id = bill.id
    await answer_view(message, session, settings)


@entry_router.message(Command("bill", "removebill"))
async def cmd_bill(
    message: Message,
    command: CommandObject,
    sessions: SessionStore,
    settings: Settings,
) -> None:
    user = message.from_user
    if not user or not message.text:
        return
    session = sessions.get(user.id)
    try:
        ledger = _open_bills(session)
    except SplitError as exc:
        await message.answer(str(exc))
        return

    index = parse_index(message.text)
    if index is None or index > len(ledger.bills):
        await message.answer(f"Usage: /{command.command} <bill number>")
        return

    bill = ledger.bills[index - 1]
    if command.command == "removebill":
        ledger.remove_bill(bill.id)
    else:
        session.active_bill_id = bill.id
    await answer_view(message, session, settings)


@entry_router.message(Command("renamebill"))
async def cmd_renamebill(
    message: Message,
    command: CommandObject,
    sessions: SessionStore,
    settings: Settings,
) -> None:
    user = message.from_user
    if not user:
        return
    session = sessions.get(user.id)
    try:
        ledger = _open_bills(session)
    except SplitError as exc:
        await message.answer(str(exc))
        return

    name = (command.args or "").strip()
    if not name:
        await message.answer("Usage: /renamebill <new name>")
        return
    bill_id = session.active_bill()
    if bill_id is not None:
        ledger.rename_bill(bill_id, name)
    await answer_view(message, session, settings)


@entry_router.message(Command("scan"))
async def cmd_scan(message: Message) -> None:
    await message.answer(SCAN_RECEIPT_STUB)


@entry_router.message(F.text & ~F.text.startswith("/"))
async def on_rows(message: Message, sessions: SessionStore, settings: Settings) -> None:
    user = message.from_user
    if not user or not message.text:
        return
    session = sessions.get(user.id)
    collection = _screen_collection(session)
    if collection is None:
        await message.answer(NOTHING_TO_EDIT)
        return

    if session.pending_import:
        await _import(message, session, settings, collection, message.text)
        return

    rows = parse_pairs(message.text)
    if not rows:
        await message.answer(ROW_FORMAT_HINT)
        return

    try:
        fill_rows(session, collection, rows)
    except SplitError as exc:
        await message.answer(str(exc))
        return
    get_logger(__name__).info("entry.rows", collection=collection.value, rows=len(rows))
    await answer_view(message, session, settings)
