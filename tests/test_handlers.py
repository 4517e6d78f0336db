from types import SimpleNamespace

import pytest
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import CommandObject

from splitwizard.config import Settings
from splitwizard.handlers.basic import cb_back, cb_confirm, cb_home, cb_mode, cb_next
from splitwizard.handlers.entry import cmd_import, cmd_remove, on_rows
from splitwizard.handlers.results import cb_assign, cb_copy, cb_preview
from splitwizard.models import Collection, Screen, SplitMode
from splitwizard.services.importer import FORMAT_ERROR
from splitwizard.state import SessionStore

USER_ID = 7


class StubMessage:
    def __init__(self, text: str | None = None) -> None:
        self.text = text
        self.from_user = SimpleNamespace(id=USER_ID)
        self.chat = SimpleNamespace(id=100)
        self.message_id = 5
        self.answers: list[str] = []
        self.edits: list[str] = []
        self.markups: list[object] = []
        self.markup_error: Exception | None = None

    async def answer(self, text: str, reply_markup=None) -> None:
        self.answers.append(text)

    async def edit_text(self, text: str, reply_markup=None) -> None:
        self.edits.append(text)

    async def edit_reply_markup(self, reply_markup=None) -> None:
        if self.markup_error is not None:
            raise self.markup_error
        self.markups.append(reply_markup)


class StubCallback:
    def __init__(self, data: str) -> None:
        self.data = data
        self.from_user = SimpleNamespace(id=USER_ID)
        self.message = StubMessage()
        self.answers: list[str | None] = []

    async def answer(self, text: str | None = None, show_alert: bool = False) -> None:
        self.answers.append(text)


class StubScheduler:
    def __init__(self) -> None:
        self.jobs: list[dict] = []

    def add_job(self, func, trigger, kwargs=None) -> None:
        self.jobs.append({"func": func, "trigger": trigger, "kwargs": kwargs})


@pytest.fixture
def settings() -> Settings:
    return Settings(BOT_TOKEN="test-token", CURRENCY_SYMBOL="₹")


@pytest.fixture
def sessions() -> SessionStore:
    return SessionStore()


@pytest.mark.asyncio
async def test_mode_selection_shows_first_step(sessions, settings):
    callback = StubCallback("mode:per-head")
    await cb_mode(callback, sessions, settings)

    assert sessions.get(USER_ID).wizard.screen == Screen.ITEMS
    assert callback.message.edits[-1].startswith("Step 1/3")


@pytest.mark.asyncio
async def test_rows_fill_placeholder_then_append(sessions, settings):
    sessions.get(USER_ID).wizard.select_mode(SplitMode.PER_HEAD)
    message = StubMessage("Pizza,450\nDrinks,200")

    await on_rows(message, sessions, settings)

    ledger = sessions.get(USER_ID).wizard.ledger
    assert [(item.name, item.price) for item in ledger.items] == [("Pizza", 450.0), ("Drinks", 200.0)]
    assert "Total: ₹650.00" in message.answers[-1]


@pytest.mark.asyncio
async def test_next_blocked_reports_reason(sessions, settings):
    sessions.get(USER_ID).wizard.select_mode(SplitMode.PER_HEAD)
    callback = StubCallback("nav:next")

    await cb_next(callback, sessions, settings)

    assert sessions.get(USER_ID).wizard.screen == Screen.ITEMS
    assert callback.answers == ["Add at least one item with a name and a price"]


@pytest.mark.asyncio
async def test_import_format_error_keeps_people(sessions, settings):
    wizard = sessions.get(USER_ID).wizard
    wizard.select_mode(SplitMode.INDIVIDUAL_ITEMS)
    wizard.edit(Collection.PEOPLE).update_person("1", name="Keep")
    message = StubMessage("/import   ,")

    await cmd_import(message, CommandObject(prefix="/", command="import", args="   ,"), sessions, settings)

    assert message.answers == [FORMAT_ERROR]
    assert [person.name for person in wizard.ledger.people] == ["Keep"]


@pytest.mark.asyncio
async def test_import_replaces_people(sessions, settings):
    sessions.get(USER_ID).wizard.select_mode(SplitMode.INDIVIDUAL_ITEMS)
    text = "John,300\nJane\nMike,200"
    message = StubMessage(f"/import {text}")

    await cmd_import(message, CommandObject(prefix="/", command="import", args=text), sessions, settings)

    people = sessions.get(USER_ID).wizard.ledger.people
    assert [(p.name, p.contribution) for p in people] == [("John", 300.0), ("Mike", 200.0)]
    assert message.answers[0] == "Imported 2 people."


@pytest.mark.asyncio
async def test_import_without_rows_waits_for_next_message(sessions, settings):
    sessions.get(USER_ID).wizard.select_mode(SplitMode.PER_HEAD)
    await cmd_import(StubMessage("/import"), CommandObject(prefix="/", command="import"), sessions, settings)
    assert sessions.get(USER_ID).pending_import is True

    await on_rows(StubMessage("Tea,100"), sessions, settings)

    session = sessions.get(USER_ID)
    assert session.pending_import is False
    assert [item.name for item in session.wizard.ledger.items] == ["Tea"]


@pytest.mark.asyncio
async def test_remove_last_row_is_silent(sessions, settings):
    sessions.get(USER_ID).wizard.select_mode(SplitMode.PER_HEAD)
    message = StubMessage("/remove 1")

    await cmd_remove(message, sessions, settings)

    assert len(sessions.get(USER_ID).wizard.ledger.items) == 1
    assert message.answers[-1].startswith("Step 1/3")


@pytest.mark.asyncio
async def test_itemized_mismatch_asks_before_results(sessions, settings, tea_and_coffee):
    session = sessions.get(USER_ID)
    session.wizard = tea_and_coffee
    tea_and_coffee.ledger.update_person(tea_and_coffee.ledger.people[0].id, contribution=0)

    asking = StubCallback("nav:next")
    await cb_next(asking, sessions, settings)
    assert session.wizard.screen == Screen.ASSIGN_ITEMS
    assert "don't match" in asking.message.edits[-1]

    confirming = StubCallback("nav:confirm")
    await cb_confirm(confirming, sessions, settings)
    assert session.wizard.screen == Screen.RESULTS
    assert confirming.message.edits[-1].startswith("Split Results")


@pytest.mark.asyncio
async def test_assign_toggle(sessions, settings, tea_and_coffee):
    session = sessions.get(USER_ID)
    session.wizard = tea_and_coffee
    ledger = tea_and_coffee.ledger
    coffee = next(item for item in ledger.items if item.name == "Coffee")
    b = next(person for person in ledger.people if person.name == "B")

    await cb_assign(StubCallback(f"assign:{coffee.id}:{b.id}"), sessions, settings)

    assert b.id in coffee.included_people


@pytest.mark.asyncio
async def test_home_with_input_asks_first(sessions, settings, tea_and_coffee):
    session = sessions.get(USER_ID)
    session.wizard = tea_and_coffee
    callback = StubCallback("nav:home")

    await cb_home(callback, sessions, settings)

    assert session.wizard.screen == Screen.ASSIGN_ITEMS
    assert callback.message.edits == ["Your progress will be lost. Are you sure you want to go home?"]


@pytest.mark.asyncio
async def test_copy_summary_sends_text_and_schedules_reset(sessions, settings, tea_and_coffee):
    session = sessions.get(USER_ID)
    session.wizard = tea_and_coffee
    tea_and_coffee.advance()
    a = next(person for person in tea_and_coffee.ledger.people if person.name == "A")

    preview = StubCallback(f"preview:{a.id}")
    await cb_preview(preview, sessions, settings)
    assert session.preview_person_id == a.id
    assert "A's Bill Summary" in preview.message.edits[-1]

    scheduler = StubScheduler()
    copy = StubCallback(f"copy:{a.id}")
    await cb_copy(copy, object(), sessions, settings, scheduler)

    assert copy.message.answers[0].startswith("A's Bill Summary")
    assert session.copied is True
    assert copy.answers == ["Copied!"]
    assert scheduler.jobs[0]["kwargs"]["session"] is session
    assert scheduler.jobs[0]["kwargs"]["message_id"] == 5


@pytest.mark.asyncio
async def test_pending_import_is_dropped_when_leaving_the_screen(sessions, settings):
    session = sessions.get(USER_ID)
    session.wizard.select_mode(SplitMode.INDIVIDUAL_ITEMS)
    await on_rows(StubMessage("A,100\nB,50"), sessions, settings)
    await cb_next(StubCallback("nav:next"), sessions, settings)
    assert session.wizard.screen == Screen.BILL

    await cmd_import(StubMessage("/import"), CommandObject(prefix="/", command="import"), sessions, settings)
    assert session.pending_import is True
    await cb_back(StubCallback("nav:back"), sessions, settings)
    assert session.pending_import is False

    await on_rows(StubMessage("C,10"), sessions, settings)

    people = session.wizard.ledger.people
    assert [(p.name, p.contribution) for p in people] == [("A", 100.0), ("B", 50.0), ("C", 10.0)]


@pytest.mark.asyncio
async def test_copy_twice_still_reports_copied(sessions, settings, tea_and_coffee):
    session = sessions.get(USER_ID)
    session.wizard = tea_and_coffee
    tea_and_coffee.advance()
    a = next(person for person in tea_and_coffee.ledger.people if person.name == "A")
    session.preview_person_id = a.id
    session.copied = True

    scheduler = StubScheduler()
    copy = StubCallback(f"copy:{a.id}")
    copy.message.markup_error = TelegramBadRequest(method=None, message="message is not modified")
    await cb_copy(copy, object(), sessions, settings, scheduler)

    assert len(copy.message.answers) == 1
    assert copy.answers == ["Copied!"]
    assert session.copied is True
    assert len(scheduler.jobs) == 1


@pytest.mark.asyncio
async def test_copy_refuses_nameless_person(sessions, settings, tea_and_coffee):
    session = sessions.get(USER_ID)
    session.wizard = tea_and_coffee
    tea_and_coffee.advance()
    nameless = tea_and_coffee.ledger.add_person()

    scheduler = StubScheduler()
    copy = StubCallback(f"copy:{nameless.id}")
    await cb_copy(copy, object(), sessions, settings, scheduler)

    assert copy.message.answers == []
    assert copy.answers == ["Person not found"]
    assert scheduler.jobs == []


@pytest.mark.asyncio
async def test_stale_copy_button_off_results_is_ignored(sessions, settings, tea_and_coffee):
    session = sessions.get(USER_ID)
    session.wizard = tea_and_coffee
    a = next(person for person in tea_and_coffee.ledger.people if person.name == "A")

    scheduler = StubScheduler()
    copy = StubCallback(f"copy:{a.id}")
    await cb_copy(copy, object(), sessions, settings, scheduler)

    assert copy.message.answers == []
    assert session.copied is False
    assert scheduler.jobs == []
