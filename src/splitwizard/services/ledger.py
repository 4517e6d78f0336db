from __future__ import annotations

import itertools
from typing import Iterable, Optional, Sequence

from splitwizard.models import (
    AssignableItem,
    Bill,
    Item,
    ItemAssignment,
    ItemShare,
    Person,
    SplitMode,
)
from splitwizard.services.validation import ContributionCheck, check_contributions

UNKNOWN_BILL = "Unknown Bill"


def default_bill_name(position: int) -> str:
    return f"Bill {position}"


def _non_negative(value: float) -> float:
    return max(0.0, float(value))


class Ledger:
    """Bills, items and people of one split session.

    Every collection keeps at least one editable row. Removal that would
    empty a collection, and any update addressed to an unknown id, is
    silently ignored.
    """

    def __init__(self, mode: SplitMode = SplitMode.PER_HEAD) -> None:
        self.mode = mode
        self._ids = itertools.count(2)
        self.bills: list[Bill] = []
        if mode == SplitMode.INDIVIDUAL_ITEMS:
            name = default_bill_name(1)
            self.bills.append(Bill(id="1", name=name, default_name=name))
        self.items: list[Item] = [self._make_item("1", self.bills[0].id if self.bills else None)]
        self.people: list[Person] = [Person(id="1")]

    @property
    def is_itemized(self) -> bool:
        return self.mode == SplitMode.INDIVIDUAL_ITEMS

    def _new_id(self) -> str:
        return str(next(self._ids))

    def _make_item(self, item_id: str, bill_id: Optional[str], name: str = "", price: float = 0.0) -> Item:
        if self.is_itemized:
            return AssignableItem(id=item_id, name=name, price=price, bill_id=bill_id or "")
        return Item(id=item_id, name=name, price=price)

    def _resolve_bill_id(self, bill_id: Optional[str]) -> Optional[str]:
        if not self.bills:
            return None
        if bill_id is not None and self.get_bill(bill_id) is not None:
            return bill_id
        return self.bills[0].id

    # bills

    def get_bill(self, bill_id: str) -> Optional[Bill]:
        return next((bill for bill in self.bills if bill.id == bill_id), None)

    def add_bill(self) -> Bill:
        name = default_bill_name(len(self.bills) + 1)
        bill = Bill(id=self._new_id(), name=name, default_name=name)
        self.bills.append(bill)
        return bill

    def rename_bill(self, bill_id: str, name: str) -> None:
        bill = self.get_bill(bill_id)
        if bill is not None:
            bill.name = name

    def remove_bill(self, bill_id: str) -> None:
        if len(self.bills) <= 1 or self.get_bill(bill_id) is None:
            return
        self.bills = [bill for bill in self.bills if bill.id != bill_id]
        self.items = [item for item in self.items if getattr(item, "bill_id", None) != bill_id]
        if not self.items:
            self.items.append(self._make_item(self._new_id(), self.bills[0].id))

    # items

    def get_item(self, item_id: str) -> Optional[Item]:
        return next((item for item in self.items if item.id == item_id), None)

    def items_for_bill(self, bill_id: str) -> list[Item]:
        return [item for item in self.items if getattr(item, "bill_id", None) == bill_id]

    def add_item(self, bill_id: Optional[str] = None) -> Item:
        item = self._make_item(self._new_id(), self._resolve_bill_id(bill_id))
        self.items.append(item)
        return item

    def update_item(self, item_id: str, name: Optional[str] = None, price: Optional[float] = None) -> None:
        item = self.get_item(item_id)
        if item is None:
            return
        if name is not None:
            item.name = name
        if price is not None:
            item.price = _non_negative(price)

    def remove_item(self, item_id: str) -> None:
        if len(self.items) <= 1:
            return
        self.items = [item for item in self.items if item.id != item_id]

    def replace_items(self, rows: Sequence[tuple[str, float]]) -> None:
        if not rows:
            return
        bill_id = self._resolve_bill_id(None)
        self.items = [
            self._make_item(self._new_id(), bill_id, name=name, price=_non_negative(price))
            for name, price in rows
        ]

    def keep_valid_items(self) -> None:
        valid = self.valid_items()
        if valid:
            self.items = valid

    # people

    def get_person(self, person_id: str) -> Optional[Person]:
        return next((person for person in self.people if person.id == person_id), None)

    def add_person(self) -> Person:
        person = Person(id=self._new_id())
        self.people.append(person)
        return person

    def update_person(
        self,
        person_id: str,
        name: Optional[str] = None,
        contribution: Optional[float] = None,
    ) -> None:
        person = self.get_person(person_id)
        if person is None:
            return
        if name is not None:
            person.name = name
        if contribution is not None:
            person.contribution = _non_negative(contribution)

    def remove_person(self, person_id: str) -> None:
        if len(self.people) <= 1 or self.get_person(person_id) is None:
            return
        self.people = [person for person in self.people if person.id != person_id]
        self._drop_missing_people()

    def replace_people(self, rows: Sequence[tuple[str, float]]) -> None:
        if not rows:
            return
        self.people = [
            Person(id=self._new_id(), name=name, contribution=_non_negative(contribution))
            for name, contribution in rows
        ]
        self._drop_missing_people()

    def keep_valid_people(self) -> None:
        valid = self.valid_people()
        if valid:
            self.people = valid
            self._drop_missing_people()

    def _drop_missing_people(self) -> None:
        known = {person.id for person in self.people}
        for item in self.items:
            if isinstance(item, AssignableItem):
                item.included_people = [pid for pid in item.included_people if pid in known]

    # assignments

    def set_included(self, item_id: str, person_id: str, included: bool) -> None:
        item = self.get_item(item_id)
        if not isinstance(item, AssignableItem) or self.get_person(person_id) is None:
            return
        if included and person_id not in item.included_people:
            item.included_people.append(person_id)
        elif not included and person_id in item.included_people:
            item.included_people.remove(person_id)

    def toggle_included(self, item_id: str, person_id: str) -> None:
        item = self.get_item(item_id)
        if isinstance(item, AssignableItem):
            self.set_included(item_id, person_id, person_id not in item.included_people)

    def select_all_people(self, item_id: str, selected: bool) -> None:
        item = self.get_item(item_id)
        if not isinstance(item, AssignableItem):
            return
        item.included_people = [person.id for person in self.valid_people()] if selected else []

    # derived

    def valid_items(self) -> list[Item]:
        return [item for item in self.items if item.is_valid()]

    def valid_people(self) -> list[Person]:
        return [person for person in self.people if person.is_valid()]

    def assigned_items(self) -> list[AssignableItem]:
        return [
            item
            for item in self.valid_items()
            if isinstance(item, AssignableItem) and item.is_assigned()
        ]

    @property
    def total(self) -> float:
        return sum((item.price for item in self.valid_items()), 0.0)

    @property
    def total_contributions(self) -> float:
        return sum((person.contribution for person in self.people), 0.0)

    @property
    def per_head_share(self) -> float:
        count = len(self.valid_people())
        return self.total / count if count else 0.0

    @property
    def has_user_input(self) -> bool:
        has_items = any(item.name.strip() or item.price > 0 for item in self.items)
        has_people = any(person.name.strip() or person.contribution > 0 for person in self.people)
        has_bills = any(bill.is_renamed() for bill in self.bills)
        return has_items or has_people or has_bills

    def contribution_check(self) -> ContributionCheck:
        return check_contributions(self.total, self.total_contributions, self.mode)

    def bill_name(self, item: Item) -> str:
        bill = self.get_bill(getattr(item, "bill_id", ""))
        return bill.name if bill is not None else UNKNOWN_BILL

    def person_item_breakdown(self, person_id: str) -> list[ItemShare]:
        person = self.get_person(person_id)
        if person is None or not person.is_valid():
            return []

        shares: list[ItemShare] = []
        for item in self.assigned_items():
            if person_id not in item.included_people:
                continue
            count = len(item.included_people)
            shares.append(
                ItemShare(
                    name=item.name,
                    bill_name=self.bill_name(item),
                    total_cost=item.price,
                    personal_cost=item.price / count,
                    split_info=f"{item.price:.2f} divided by {count}" if count > 1 else None,
                )
            )
        return shares

    def items_overview(self, bill_id: Optional[str] = None) -> list[ItemAssignment]:
        overview: list[ItemAssignment] = []
        for item in self.valid_items():
            if bill_id is not None and getattr(item, "bill_id", None) != bill_id:
                continue
            included: Iterable[str] = getattr(item, "included_people", [])
            names = [person.name for person in map(self.get_person, included) if person is not None]
            overview.append(
                ItemAssignment(
                    item_id=item.id,
                    name=item.name,
                    price=item.price,
                    bill_name=self.bill_name(item),
                    people=names,
                )
            )
        return overview
