from __future__ import annotations

from typing import Optional

from splitwizard.models import AssignableItem, Direction, Screen, SplitMode
from splitwizard.services.importer import SAMPLE_ITEMS, SAMPLE_PEOPLE
from splitwizard.services.ledger import Ledger
from splitwizard.services.wizard import Wizard

MODE_TITLES = {
    SplitMode.PER_HEAD: "Per Head Split",
    SplitMode.INDIVIDUAL_ITEMS: "Individual Items Payment",
}

MODE_DESCRIPTIONS = {
    SplitMode.PER_HEAD: "Split total equally among everyone",
    SplitMode.INDIVIDUAL_ITEMS: "Pay only for items you consumed",
}

EMPTY_RESULTS = {
    SplitMode.PER_HEAD: "Everyone paid their fair share! 🎉",
    SplitMode.INDIVIDUAL_ITEMS: "No payments needed! 🎉",
}

SCAN_RECEIPT_STUB = "Scan Receipt (Coming Soon)"


def money(amount: float, currency: str) -> str:
    return f"{currency}{amount:.2f}"


def format_person_summary(ledger: Ledger, person_id: str, currency: str) -> Optional[str]:
    person = ledger.get_person(person_id)
    if person is None:
        return None

    breakdown = ledger.person_item_breakdown(person_id)
    items_total = sum((share.personal_cost for share in breakdown), 0.0)
    difference = person.contribution - items_total
    direction = Direction.RECEIVE if difference >= 0 else Direction.PAY

    text = f"{person.name}'s Bill Summary\n\n"
    text += "Items:\n"
    for share in breakdown:
        text += f"- {share.name} ({money(share.personal_cost, currency)}"
        if share.split_info:
            text += f" - {share.split_info}"
        text += ")\n"
    text += f"\nItems total: {money(items_total, currency)}\n"
    text += f"Amount {person.name} has paid: {money(person.contribution, currency)}\n"
    text += f"Amount to {direction.value}: {money(abs(difference), currency)}\n"
    return text


def format_items_overview(ledger: Ledger, bill_id: Optional[str], currency: str) -> str:
    overview = ledger.items_overview(bill_id)
    if not overview:
        return "No items in this bill."
    lines = []
    for entry in overview:
        line = f"- {entry.name} {money(entry.price, currency)}"
        if bill_id is None:
            line += f" ({entry.bill_name})"
        if entry.people:
            line += f": {', '.join(entry.people)}"
        lines.append(line)
    return "\n".join(lines)


def format_results(wizard: Wizard, currency: str) -> str:
    ledger = wizard.ledger
    lines = ["Split Results", MODE_TITLES[wizard.mode], ""]

    if wizard.mode == SplitMode.PER_HEAD:
        count = len(ledger.valid_people())
        lines.append(f"Total: {money(ledger.total, currency)}")
        lines.append(f"Per head: {ledger.total:.2f} ÷ {count} = {ledger.per_head_share:.2f}")
    else:
        lines.append(f"Items total: {money(ledger.total, currency)}")
        lines.append(f"Contributions: {money(ledger.total_contributions, currency)}")
    lines.append("")

    for result in wizard.results:
        verb = "receives" if result.direction == Direction.RECEIVE else "pays"
        lines.append(f"{result.name} {verb} {money(result.amount, currency)}")
    if not wizard.results:
        lines.append(EMPTY_RESULTS[wizard.mode])
    return "\n".join(lines)


def _header(wizard: Wizard, title: str) -> list[str]:
    step, steps = wizard.progress
    return [f"Step {step}/{steps} · {title}", ""]


def _check_line(ledger: Ledger) -> str:
    check = ledger.contribution_check()
    return ("✅ " if check.is_valid else "⚠️ ") + check.message


def _format_items_screen(wizard: Wizard, currency: str) -> list[str]:
    ledger = wizard.ledger
    lines = _header(wizard, "What was ordered?")
    for index, item in enumerate(ledger.items, start=1):
        lines.append(f"{index}. {item.name or '(empty)'} {money(item.price, currency)}")
    lines += [
        "",
        f"Total: {money(ledger.total, currency)}",
        "",
        "Send lines like 'Pizza,450' to add items.",
        f"/import with lines replaces the list, e.g.\n{SAMPLE_ITEMS}",
        "/remove <n> deletes row n.",
    ]
    return lines


def _format_people_screen(wizard: Wizard, currency: str) -> list[str]:
    ledger = wizard.ledger
    if wizard.mode == SplitMode.PER_HEAD:
        lines = _header(wizard, "Who is splitting the bill?")
    else:
        lines = _header(wizard, "How many persons were present at the meetup?")
    for index, person in enumerate(ledger.people, start=1):
        lines.append(f"{index}. {person.name or '(empty)'} paid {money(person.contribution, currency)}")
    lines.append("")
    if wizard.mode == SplitMode.PER_HEAD:
        count = len(ledger.valid_people())
        lines.append(f"Total: {money(ledger.total, currency)}")
        if count:
            lines.append(f"Each person pays: {money(ledger.per_head_share, currency)}")
        lines.append(f"Contributions: {money(ledger.total_contributions, currency)}")
        lines.append(_check_line(ledger))
        lines.append("")
    lines += [
        "Send lines like 'John,300' (name, amount paid) to add people.",
        f"/import with lines replaces the list, e.g.\n{SAMPLE_PEOPLE}",
        "/remove <n> deletes row n.",
    ]
    return lines


def _format_bill_screen(wizard: Wizard, currency: str, active_bill_id: Optional[str]) -> list[str]:
    ledger = wizard.ledger
    lines = _header(wizard, "What was on the bill?")
    active = active_bill_id if ledger.get_bill(active_bill_id or "") else ledger.bills[0].id
    for bill_index, bill in enumerate(ledger.bills, start=1):
        marker = " ◀" if bill.id == active else ""
        lines.append(f"[{bill_index}] {bill.name}{marker}")
        for item in ledger.items_for_bill(bill.id):
            position = ledger.items.index(item) + 1
            lines.append(f"  {position}. {item.name or '(empty)'} {money(item.price, currency)}")
    lines += [
        "",
        f"Items total: {money(ledger.total, currency)}",
        f"Contributions: {money(ledger.total_contributions, currency)}",
        _check_line(ledger),
        "",
        "Send lines like 'Tea,100' to add items to the marked bill.",
        "/addbill [name] adds a bill, /bill <n> selects one, /renamebill <name> renames it, "
        "/removebill <n> deletes one.",
        "/import replaces all items, /remove <n> deletes item n.",
        f"/scan: {SCAN_RECEIPT_STUB}",
    ]
    return lines


def _format_assign_screen(wizard: Wizard, currency: str) -> list[str]:
    ledger = wizard.ledger
    lines = _header(wizard, "Who had what?")
    for item in ledger.valid_items():
        if not isinstance(item, AssignableItem):
            continue
        lines.append(f"{item.name} {money(item.price, currency)} ({ledger.bill_name(item)})")
        if item.included_people:
            lines.append(f"  Cost per person: {money(item.price / len(item.included_people), currency)}")
    lines += ["", "Tap names to include or exclude them from an item."]
    return lines


def format_mode_selection() -> str:
    lines = ["Choose Split Method", ""]
    for mode in SplitMode:
        lines.append(f"{MODE_TITLES[mode]}: {MODE_DESCRIPTIONS[mode]}")
    return "\n".join(lines)


def format_screen(wizard: Wizard, currency: str, active_bill_id: Optional[str] = None) -> str:
    screen = wizard.screen
    if screen == Screen.MODE_SELECTION:
        return format_mode_selection()
    if screen == Screen.RESULTS:
        return format_results(wizard, currency)
    if screen == Screen.ITEMS:
        lines = _format_items_screen(wizard, currency)
    elif screen == Screen.PEOPLE:
        lines = _format_people_screen(wizard, currency)
    elif screen == Screen.BILL:
        lines = _format_bill_screen(wizard, currency, active_bill_id)
    else:
        lines = _format_assign_screen(wizard, currency)
    return "\n".join(lines)
