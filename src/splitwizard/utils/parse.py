from __future__ import annotations

import math
import re

LEADING_NUMBER = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def parse_number(text: str, default: float = 0.0) -> float:
    """Parse the leading decimal of ``text``.

    Trailing garbage is ignored ("300abc" -> 300.0). Text without a leading
    number, or one that overflows to infinity ("1e999"), gives ``default``.
    """
    match = LEADING_NUMBER.match(text.strip())
    if match is None:
        return default
    value = float(match.group(0))
    return value if math.isfinite(value) else default


def parse_rows(text: str) -> list[list[str]]:
    """Split two-column ``name,value`` text into trimmed rows.

    Rows with fewer than two cells or an empty first cell are dropped.
    """
    rows = [[cell.strip() for cell in line.split(",")] for line in text.strip().split("\n")]
    return [row for row in rows if len(row) > 1 and row[0]]


def parse_pairs(text: str) -> list[tuple[str, float]]:
    return [(row[0], parse_number(row[1])) for row in parse_rows(text)]


def parse_index(text: str) -> int | None:
    """1-based row number from a command argument, ``None`` when absent."""
    parts = text.split(maxsplit=1)
    if len(parts) < 2:
        return None
    try:
        index = int(parts[1].strip())
    except ValueError:
        return None
    return index if index >= 1 else None
