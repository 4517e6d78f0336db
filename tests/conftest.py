import pytest

from splitwizard.models import Collection, SplitMode
from splitwizard.services.wizard import Wizard


def person_id(ledger, name):
    return next(person.id for person in ledger.people if person.name == name)


def item_id(ledger, name):
    return next(item.id for item in ledger.items if item.name == name)


@pytest.fixture
def tea_and_coffee() -> Wizard:
    """Itemized session on the assign screen: A paid 160, B paid nothing.

    Tea (100) is shared by A and B, Coffee (60) is A's alone.
    """
    wizard = Wizard()
    wizard.select_mode(SplitMode.INDIVIDUAL_ITEMS)

    people = wizard.edit(Collection.PEOPLE)
    people.update_person("1", name="A", contribution=160)
    b = people.add_person()
    people.update_person(b.id, name="B")
    wizard.advance()

    items = wizard.edit(Collection.ITEMS)
    items.update_item("1", name="Tea", price=100)
    coffee = items.add_item()
    items.update_item(coffee.id, name="Coffee", price=60)
    wizard.advance()

    ledger = wizard.edit(Collection.ASSIGNMENTS)
    a_id, b_id = person_id(ledger, "A"), person_id(ledger, "B")
    ledger.set_included(item_id(ledger, "Tea"), a_id, True)
    ledger.set_included(item_id(ledger, "Tea"), b_id, True)
    ledger.set_included(coffee.id, a_id, True)
    return wizard
