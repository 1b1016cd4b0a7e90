"""
Month-scoped document numbers: '{PREFIX}-{YYYY}{MM}-{NNN}'.

The next number is the count of existing numbers for the month plus one.
Nothing locks the sequence: two concurrent creates in the same month can
compute the same number, and the second one is then rejected by the
uniqueness check. The user simply retries.

Deleting a record of the month lowers the count, so the next generated
number repeats the highest existing one and is rejected the same way.
Auto-numbering for that month stays blocked until the count moves past
the existing numbers; explicit numbers are still accepted.
"""
from datetime import date
from typing import Awaitable, Callable

ORDER_PREFIX = "OC"
INVOICE_PREFIX = "FAC"


def month_prefix(prefix: str, on: date) -> str:
    return f"{prefix}-{on.year}{on.month:02d}"


def format_number(prefix: str, on: date, sequence: int) -> str:
    return f"{month_prefix(prefix, on)}-{sequence:03d}"


async def next_number(prefix: str, on: date, count_with_prefix: Callable[[str], Awaitable[int]]) -> str:
    """
    Build the next number of the month for `on`, counting existing
    records through the repository callback.
    """
    existing = await count_with_prefix(f"{month_prefix(prefix, on)}-")
    return format_number(prefix, on, existing + 1)
