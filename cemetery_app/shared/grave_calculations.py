"""
Derived field calculations for burial records
"""

import re
from collections.abc import Iterable
from datetime import date


NON_DIGITS = re.compile(r'\D')


def parse_iso_date(value: str) -> date | None:
    """Parse a YYYY-MM-DD string, returning None for empty or invalid input"""
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except (TypeError, ValueError):
        return None


def compute_age(birth: str, death: str, current_age: int = 0) -> int:
    """
    Full years elapsed between birth and death

    Returns current_age unchanged when either date is missing or unparsable.
    Never negative.
    """
    birth_date = parse_iso_date(birth)
    death_date = parse_iso_date(death)
    if birth_date is None or death_date is None:
        return current_age

    age = death_date.year - birth_date.year
    if (death_date.month, death_date.day) < (birth_date.month, birth_date.day):
        age -= 1
    return max(0, age)


def next_grave_number(records: Iterable) -> str:
    """
    Suggest the next grave number from the existing records

    Digits are pulled out of every grave number; the highest plus one wins.
    With no numeric grave numbers the suggestion is the record count plus one.
    """
    records = list(records)
    if not records:
        return "1"

    numbers = []
    for record in records:
        digits = NON_DIGITS.sub('', record.grave_number or '')
        try:
            numbers.append(int(digits))
        except ValueError:
            continue

    if not numbers:
        return str(len(records) + 1)
    return str(max(numbers) + 1)
