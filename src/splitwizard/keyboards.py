from __future__ import annotations

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from splitwizard.models import AssignableItem, Screen, SplitMode
from splitwizard.services.summary import MODE_TITLES
from splitwizard.state import ALL_BILLS, Session

PEOPLE_PER_ROW = 3

EDIT_SHORTCUTS = {
    SplitMode.PER_HEAD: [("Edit Items", Screen.ITEMS), ("Edit People", Screen.PEOPLE)],
    SplitMode.INDIVIDUAL_ITEMS: [
        ("Edit Bills", Screen.BILL),
        ("Edit People", Screen.PEOPLE),
        ("Edit Costs", Screen.ASSIGN_ITEMS),
    ],
}


def _chunks(buttons: list[InlineKeyboardButton], size: int) -> list[list[InlineKeyboardButton]]:
    return [buttons[i : i + size] for i in range(0, len(buttons), size)]


def mode_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text=f"👥 {MODE_TITLES[SplitMode.PER_HEAD]}", callback_data="mode:per-head")],
            [
                InlineKeyboardButton(
                    text=f"🧾 {MODE_TITLES[SplitMode.INDIVIDUAL_ITEMS]}",
                    callback_data="mode:individual-items",
                )
            ],
        ]
    )


def _nav_rows(session: Session) -> list[list[InlineKeyboardButton]]:
    wizard = session.wizard
    calculates = wizard.screen == Screen.ASSIGN_ITEMS or (
        wizard.mode == SplitMode.PER_HEAD and wizard.screen == Screen.PEOPLE
    )
    forward_label = "Calculate" if calculates else "Next »"

    row: list[InlineKeyboardButton] = []
    if wizard.has_user_input:
        row.append(InlineKeyboardButton(text="« Back", callback_data="nav:back"))
    row.append(InlineKeyboardButton(text=forward_label, callback_data="nav:next"))
    return [row, [InlineKeyboardButton(text="🏠 Home", callback_data="nav:home")]]


def screen_keyboard(session: Session) -> InlineKeyboardMarkup:
    wizard = session.wizard
    if wizard.screen == Screen.MODE_SELECTION:
        return mode_keyboard()
    if wizard.screen == Screen.RESULTS:
        return results_keyboard(session)
    if wizard.screen == Screen.ASSIGN_ITEMS:
        return assign_keyboard(session)
    return InlineKeyboardMarkup(inline_keyboard=_nav_rows(session))


def assign_keyboard(session: Session) -> InlineKeyboardMarkup:
    ledger = session.wizard.ledger
    people = ledger.valid_people()
    rows: list[list[InlineKeyboardButton]] = []

    for item in ledger.valid_items():
        if not isinstance(item, AssignableItem):
            continue
        everyone = bool(people) and all(person.id in item.included_people for person in people)
        rows.append(
            [
                InlineKeyboardButton(
                    text=f"{item.name}: {'clear all' if everyone else 'select all'}",
                    callback_data=f"assign_all:{item.id}",
                )
            ]
        )
        toggles = [
            InlineKeyboardButton(
                text=f"{'✅' if person.id in item.included_people else '▫️'} {person.name}",
                callback_data=f"assign:{item.id}:{person.id}",
            )
            for person in people
        ]
        rows.extend(_chunks(toggles, PEOPLE_PER_ROW))

    rows.extend(_nav_rows(session))
    return InlineKeyboardMarkup(inline_keyboard=rows)


def confirm_keyboard(confirm_data: str, confirm_text: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(text=confirm_text, callback_data=confirm_data),
                InlineKeyboardButton(text="Cancel", callback_data="nav:stay"),
            ]
        ]
    )


def results_keyboard(session: Session) -> InlineKeyboardMarkup:
    wizard = session.wizard
    ledger = wizard.ledger
    rows: list[list[InlineKeyboardButton]] = [
        [
            InlineKeyboardButton(text=f"✏️ {label}", callback_data=f"jump:{screen.value}")
            for label, screen in EDIT_SHORTCUTS[wizard.mode]
        ]
    ]

    if wizard.mode == SplitMode.INDIVIDUAL_ITEMS:
        filters = [(ALL_BILLS, "All Items")] + [(bill.id, bill.name) for bill in ledger.bills]
        rows.extend(
            _chunks(
                [
                    InlineKeyboardButton(
                        text=f"· {label}" if session.items_preview == key else label,
                        callback_data=f"bills:{key}",
                    )
                    for key, label in filters
                ],
                PEOPLE_PER_ROW,
            )
        )
        previews = [
            InlineKeyboardButton(
                text=f"· {person.name}" if session.preview_person_id == person.id else person.name,
                callback_data=f"preview:{person.id}",
            )
            for person in ledger.valid_people()
        ]
        rows.extend(_chunks(previews, PEOPLE_PER_ROW))
        if session.preview_person_id:
            rows.append(
                [
                    InlineKeyboardButton(
                        text="✔️ Copied!" if session.copied else "📋 Copy Summary",
                        callback_data=f"copy:{session.preview_person_id}",
                    )
                ]
            )

    rows.append([InlineKeyboardButton(text="New Split", callback_data="nav:reset")])
    return InlineKeyboardMarkup(inline_keyboard=rows)
