"""Display helpers shared by the CLI and the report consumers."""

from __future__ import annotations

CURRENCY_SYMBOL = "₹"


def _group_indian(digits: str) -> str:
    # Last three digits, then groups of two: 12,34,567
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_currency(amount: float) -> str:
    """
    Round to whole rupees and group digits the Indian way.

    Example:
        >>> format_currency(1234567.4)
        '₹12,34,567'
    """
    value = int(round(amount))
    sign = "-" if value < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL}{_group_indian(str(abs(value)))}"


def format_energy(kwh: float) -> str:
    """``kWh`` below 1000, otherwise ``MWh`` with one decimal."""
    if kwh >= 1000:
        return f"{kwh / 1000:.1f} MWh"
    return f"{round(kwh)} kWh"
