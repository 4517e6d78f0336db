from __future__ import annotations

from typing import Iterable

from splitwizard.errors import SettlementRefused
from splitwizard.models import Direction, Person, SettlementResult, SplitMode
from splitwizard.services.ledger import Ledger
from splitwizard.services.validation import TOLERANCE


def _results(people: Iterable[Person], obligations: dict[str, float]) -> list[SettlementResult]:
    results: list[SettlementResult] = []
    for person in people:
        difference = person.contribution - obligations.get(person.id, 0.0)
        amount = abs(difference)
        if amount <= TOLERANCE:
            continue
        direction = Direction.RECEIVE if difference >= 0 else Direction.PAY
        results.append(SettlementResult(name=person.name, amount=amount, direction=direction))
    return results


def settle_per_head(ledger: Ledger) -> list[SettlementResult]:
    people = ledger.valid_people()
    if not people:
        return []

    check = ledger.contribution_check()
    if not check.is_valid:
        raise SettlementRefused(check.message)

    share = ledger.total / len(people)
    return _results(people, {person.id: share for person in people})


def person_obligations(ledger: Ledger) -> dict[str, float]:
    obligations = {person.id: 0.0 for person in ledger.valid_people()}
    for item in ledger.assigned_items():
        share = item.price / len(item.included_people)
        for person_id in item.included_people:
            if person_id in obligations:
                obligations[person_id] += share
    return obligations


def settle_itemized(ledger: Ledger) -> list[SettlementResult]:
    people = ledger.valid_people()
    if not people:
        return []
    return _results(people, person_obligations(ledger))


def calculate_results(ledger: Ledger) -> list[SettlementResult]:
    if ledger.mode == SplitMode.PER_HEAD:
        return settle_per_head(ledger)
    return settle_itemized(ledger)
