import pytest

from splitwizard.errors import SettlementRefused
from splitwizard.models import Direction, SettlementResult, SplitMode
from splitwizard.services.ledger import Ledger
from splitwizard.services.settlement import (
    calculate_results,
    person_obligations,
    settle_itemized,
    settle_per_head,
)


def _per_head(total, contributions):
    ledger = Ledger(SplitMode.PER_HEAD)
    ledger.update_item("1", name="Dinner", price=total)
    for index, contribution in enumerate(contributions):
        person = ledger.people[0] if index == 0 else ledger.add_person()
        ledger.update_person(person.id, name=f"P{index + 1}", contribution=contribution)
    return ledger


def test_per_head_fully_settled():
    assert settle_per_head(_per_head(300, [100, 100, 100])) == []


def test_per_head_uneven_contributions():
    results = settle_per_head(_per_head(300, [150, 100, 50]))
    assert results == [
        SettlementResult(name="P1", amount=50.0, direction=Direction.RECEIVE),
        SettlementResult(name="P3", amount=50.0, direction=Direction.PAY),
    ]


def test_per_head_is_zero_sum():
    results = settle_per_head(_per_head(100, [100, 0, 0]))
    received = sum(r.amount for r in results if r.direction == Direction.RECEIVE)
    paid = sum(r.amount for r in results if r.direction == Direction.PAY)
    assert received == pytest.approx(paid)
    assert received == pytest.approx(200 / 3)
    assert all(r.amount > 0.01 for r in results)


def test_per_head_refuses_unreconciled_contributions():
    with pytest.raises(SettlementRefused):
        settle_per_head(_per_head(300, [100, 100]))


def test_per_head_without_valid_people():
    ledger = Ledger(SplitMode.PER_HEAD)
    ledger.update_item("1", name="Dinner", price=300)
    assert settle_per_head(ledger) == []


def test_per_head_ignores_anonymous_contributions_in_share():
    ledger = _per_head(90, [45, 45])
    anonymous = ledger.add_person()
    ledger.update_person(anonymous.id, contribution=0)
    assert settle_per_head(ledger) == []


def test_itemized_round_trip(tea_and_coffee):
    ledger = tea_and_coffee.ledger
    obligations = person_obligations(ledger)
    assert sorted(obligations.values()) == [50.0, 110.0]

    assert settle_itemized(ledger) == [
        SettlementResult(name="A", amount=50.0, direction=Direction.RECEIVE),
        SettlementResult(name="B", amount=50.0, direction=Direction.PAY),
    ]


def test_itemized_obligations_sum_to_total():
    ledger = Ledger(SplitMode.INDIVIDUAL_ITEMS)
    names = ["A", "B", "C"]
    for index, name in enumerate(names):
        person = ledger.people[0] if index == 0 else ledger.add_person()
        ledger.update_person(person.id, name=name)
    ledger.update_item("1", name="Pizza", price=100)
    ledger.select_all_people("1", True)
    wine = ledger.add_item()
    ledger.update_item(wine.id, name="Wine", price=70)
    ledger.set_included(wine.id, ledger.people[0].id, True)
    ledger.set_included(wine.id, ledger.people[1].id, True)

    obligations = person_obligations(ledger)
    assert sum(obligations.values()) == pytest.approx(ledger.total)
    assert obligations[ledger.people[2].id] == pytest.approx(100 / 3)


def test_itemized_proceeds_despite_mismatch():
    ledger = Ledger(SplitMode.INDIVIDUAL_ITEMS)
    ledger.update_person("1", name="Solo", contribution=10)
    ledger.update_item("1", name="Soup", price=40)
    ledger.set_included("1", "1", True)

    assert ledger.contribution_check().is_valid is False
    assert settle_itemized(ledger) == [
        SettlementResult(name="Solo", amount=30.0, direction=Direction.PAY),
    ]


def test_itemized_unassigned_person_owes_nothing(tea_and_coffee):
    ledger = tea_and_coffee.ledger
    guest = ledger.add_person()
    ledger.update_person(guest.id, name="Guest", contribution=20)

    results = settle_itemized(ledger)
    assert SettlementResult(name="Guest", amount=20.0, direction=Direction.RECEIVE) in results


def test_calculate_results_dispatches_on_mode(tea_and_coffee):
    assert calculate_results(_per_head(300, [150, 100, 50]))[0].name == "P1"
    assert calculate_results(tea_and_coffee.ledger)[1].name == "B"
