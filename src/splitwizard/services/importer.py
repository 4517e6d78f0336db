from __future__ import annotations

from splitwizard.errors import ImportFormatError
from splitwizard.logging import get_logger
from splitwizard.services.ledger import Ledger
from splitwizard.utils.parse import parse_pairs

FORMAT_ERROR = "Error parsing CSV. Please check the format."

SAMPLE_PEOPLE = "John,300\nJane,250\nMike,200"
SAMPLE_ITEMS = "Pizza,450\nDrinks,200\nDessert,150"


def import_people(ledger: Ledger, text: str) -> int:
    rows = parse_pairs(text)
    if not rows:
        raise ImportFormatError(FORMAT_ERROR)
    ledger.replace_people(rows)
    get_logger(__name__).info("import.people", rows=len(rows))
    return len(rows)


def import_items(ledger: Ledger, text: str) -> int:
    rows = parse_pairs(text)
    if not rows:
        raise ImportFormatError(FORMAT_ERROR)
    ledger.replace_items(rows)
    get_logger(__name__).info("import.items", rows=len(rows), mode=ledger.mode.value)
    return len(rows)
