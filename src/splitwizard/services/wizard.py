"""Screen state machine driving a split session."""

from __future__ import annotations

from typing import Callable, Optional

from splitwizard.errors import TransitionBlocked
from splitwizard.logging import get_logger
from splitwizard.models import Collection, Screen, SettlementResult, SplitMode
from splitwizard.services.ledger import Ledger
from splitwizard.services.settlement import calculate_results

PER_HEAD = SplitMode.PER_HEAD
ITEMIZED = SplitMode.INDIVIDUAL_ITEMS

PATHS: dict[SplitMode, tuple[Screen, ...]] = {
    PER_HEAD: (Screen.ITEMS, Screen.PEOPLE, Screen.RESULTS),
    ITEMIZED: (Screen.PEOPLE, Screen.BILL, Screen.ASSIGN_ITEMS, Screen.RESULTS),
}

FORWARD: dict[tuple[SplitMode, Screen], Screen] = {
    (PER_HEAD, Screen.ITEMS): Screen.PEOPLE,
    (PER_HEAD, Screen.PEOPLE): Screen.RESULTS,
    (ITEMIZED, Screen.PEOPLE): Screen.BILL,
    (ITEMIZED, Screen.BILL): Screen.ASSIGN_ITEMS,
    (ITEMIZED, Screen.ASSIGN_ITEMS): Screen.RESULTS,
}

BACKWARD: dict[tuple[SplitMode, Screen], Screen] = {
    (PER_HEAD, Screen.PEOPLE): Screen.ITEMS,
    (ITEMIZED, Screen.PEOPLE): Screen.MODE_SELECTION,
    (ITEMIZED, Screen.BILL): Screen.PEOPLE,
    (ITEMIZED, Screen.ASSIGN_ITEMS): Screen.BILL,
    (PER_HEAD, Screen.RESULTS): Screen.PEOPLE,
    (ITEMIZED, Screen.RESULTS): Screen.ASSIGN_ITEMS,
}

EDITABLE: dict[tuple[SplitMode, Screen], frozenset[Collection]] = {
    (PER_HEAD, Screen.ITEMS): frozenset({Collection.ITEMS}),
    (PER_HEAD, Screen.PEOPLE): frozenset({Collection.PEOPLE}),
    (ITEMIZED, Screen.PEOPLE): frozenset({Collection.PEOPLE}),
    (ITEMIZED, Screen.BILL): frozenset({Collection.BILLS, Collection.ITEMS}),
    (ITEMIZED, Screen.ASSIGN_ITEMS): frozenset({Collection.ASSIGNMENTS}),
}

Guard = Callable[[Ledger], Optional[str]]


def _needs_valid_items(ledger: Ledger) -> Optional[str]:
    if not ledger.valid_items():
        return "Add at least one item with a name and a price"
    return None


def _needs_valid_people(ledger: Ledger) -> Optional[str]:
    if not ledger.valid_people():
        return "Add at least one person with a name"
    return None


def _needs_settled_contributions(ledger: Ledger) -> Optional[str]:
    reason = _needs_valid_people(ledger)
    if reason:
        return reason
    check = ledger.contribution_check()
    return None if check.is_valid else check.message


def _needs_assigned_items(ledger: Ledger) -> Optional[str]:
    if not ledger.assigned_items():
        return "Assign at least one item to somebody"
    return None


GUARDS: dict[tuple[SplitMode, Screen], Guard] = {
    (PER_HEAD, Screen.ITEMS): _needs_valid_items,
    (PER_HEAD, Screen.PEOPLE): _needs_settled_contributions,
    (ITEMIZED, Screen.PEOPLE): _needs_valid_people,
    (ITEMIZED, Screen.BILL): _needs_valid_items,
    (ITEMIZED, Screen.ASSIGN_ITEMS): _needs_assigned_items,
}

PRUNE: dict[tuple[SplitMode, Screen], Callable[[Ledger], None]] = {
    (PER_HEAD, Screen.ITEMS): Ledger.keep_valid_items,
    (ITEMIZED, Screen.PEOPLE): Ledger.keep_valid_people,
    (ITEMIZED, Screen.BILL): Ledger.keep_valid_items,
}


class Wizard:
    """Session-scoped wizard state: mode, current screen, ledger and results.

    Forward moves are guarded per ``(mode, screen)``; a refused move raises
    :class:`TransitionBlocked` and leaves the session untouched. Entering
    the results screen runs the settlement for the active mode.
    """

    def __init__(self) -> None:
        self._log = get_logger(__name__)
        self.mode = PER_HEAD
        self.screen = Screen.MODE_SELECTION
        self.ledger = Ledger(ITEMIZED)
        self.results: list[SettlementResult] = []

    @property
    def has_user_input(self) -> bool:
        return self.ledger.has_user_input

    @property
    def progress(self) -> tuple[int, int]:
        path = PATHS[self.mode]
        if self.screen == Screen.MODE_SELECTION:
            return 0, len(path)
        return path.index(self.screen) + 1, len(path)

    def select_mode(self, mode: SplitMode) -> Screen:
        if self.screen != Screen.MODE_SELECTION:
            raise TransitionBlocked("The split method can only be chosen on the first screen")
        self.mode = mode
        self.ledger = Ledger(mode)
        self.results = []
        self.screen = PATHS[mode][0]
        self._log.info("wizard.mode", mode=mode.value, screen=self.screen.value)
        return self.screen

    def reset(self) -> None:
        self.mode = PER_HEAD
        self.screen = Screen.MODE_SELECTION
        self.ledger = Ledger(ITEMIZED)
        self.results = []
        self._log.info("wizard.reset")

    def blocked_reason(self) -> Optional[str]:
        key = (self.mode, self.screen)
        if key not in FORWARD:
            return "There is no next step from here"
        return GUARDS[key](self.ledger)

    def can_advance(self) -> bool:
        return self.blocked_reason() is None

    def needs_confirmation(self) -> bool:
        if self.mode != ITEMIZED or FORWARD.get((self.mode, self.screen)) != Screen.RESULTS:
            return False
        return not self.ledger.contribution_check().is_valid

    def confirmation_prompt(self) -> str:
        return (
            f"Items total ({self.ledger.total:.2f}) and contributions "
            f"({self.ledger.total_contributions:.2f}) don't match. Do you want to continue anyway?"
        )

    def advance(self) -> Screen:
        reason = self.blocked_reason()
        if reason is not None:
            raise TransitionBlocked(reason)

        key = (self.mode, self.screen)
        target = FORWARD[key]
        if target == Screen.RESULTS:
            self.results = calculate_results(self.ledger)
        prune = PRUNE.get(key)
        if prune is not None:
            prune(self.ledger)

        self._log.info("wizard.advance", mode=self.mode.value, origin=self.screen.value, target=target.value)
        self.screen = target
        return self.screen

    def back(self) -> Screen:
        self.screen = BACKWARD.get((self.mode, self.screen), Screen.MODE_SELECTION)
        return self.screen

    def jump_to(self, screen: Screen) -> Screen:
        if self.screen != Screen.RESULTS:
            raise TransitionBlocked("Editing shortcuts are only available on the results screen")
        if screen not in PATHS[self.mode] or screen == Screen.RESULTS:
            raise TransitionBlocked(f"{screen.value} is not part of the {self.mode.value} split")
        self.screen = screen
        return self.screen

    def can_edit(self, collection: Collection) -> bool:
        return collection in EDITABLE.get((self.mode, self.screen), frozenset())

    def edit(self, collection: Collection) -> Ledger:
        if not self.can_edit(collection):
            raise TransitionBlocked(f"{collection.value.capitalize()} cannot be changed on this screen")
        self.results = []
        return self.ledger
