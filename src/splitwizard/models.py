from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class SplitMode(str, Enum):
    PER_HEAD = "per-head"
    INDIVIDUAL_ITEMS = "individual-items"


class Screen(str, Enum):
    MODE_SELECTION = "mode-selection"
    ITEMS = "items"
    PEOPLE = "people"
    BILL = "bill"
    ASSIGN_ITEMS = "assign-items"
    RESULTS = "results"


class Collection(str, Enum):
    BILLS = "bills"
    ITEMS = "items"
    PEOPLE = "people"
    ASSIGNMENTS = "assignments"


class Direction(str, Enum):
    PAY = "pay"
    RECEIVE = "receive"


@dataclass(slots=True)
class Bill:
    id: str
    name: str
    default_name: str = ""

    def is_renamed(self) -> bool:
        return self.name != self.default_name


@dataclass(slots=True)
class Item:
    """Flat item used by the per-head split."""

    id: str
    name: str = ""
    price: float = 0.0

    def is_valid(self) -> bool:
        return bool(self.name.strip()) and self.price > 0


@dataclass(slots=True)
class AssignableItem(Item):
    """Item that belongs to a bill and is shared by the people ticked for it."""

    bill_id: str = ""
    included_people: list[str] = field(default_factory=list)

    def is_assigned(self) -> bool:
        return bool(self.included_people)


@dataclass(slots=True)
class Person:
    id: str
    name: str = ""
    contribution: float = 0.0

    def is_valid(self) -> bool:
        return bool(self.name.strip())


@dataclass(slots=True)
class SettlementResult:
    name: str
    amount: float
    direction: Direction


@dataclass(slots=True)
class ItemShare:
    name: str
    bill_name: str
    total_cost: float
    personal_cost: float
    split_info: Optional[str] = None


@dataclass(slots=True)
class ItemAssignment:
    item_id: str
    name: str
    price: float
    bill_name: str
    people: list[str] = field(default_factory=list)
