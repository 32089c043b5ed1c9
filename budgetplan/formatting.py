"""Indian-locale money formatting used in console summaries and reports."""

from __future__ import annotations

import math

LAKH = 100_000


def _group_indian(digits: str) -> str:
    # last three digits, then groups of two: 12,34,56,789
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


def _format(value: float, decimals: int) -> str:
    if value is None or (isinstance(value, float) and not math.isfinite(value)):
        return "-"
    rounded = f"{abs(float(value)):.{decimals}f}"
    whole, _, fraction = rounded.partition(".")
    sign = "-" if float(value) < 0 and float(rounded) != 0 else ""
    text = sign + _group_indian(whole)
    return f"{text}.{fraction}" if fraction else text


def format_inr(value: float) -> str:
    """Format rupees with Indian digit grouping and no decimals."""

    return _format(value, 0)


def format_lakhs(value: float) -> str:
    """Express ``value`` in lakhs, e.g. ``12,34,56,789`` becomes ``1,234.57``."""

    if value is None:
        return "-"
    return _format(float(value) / LAKH, 2)


__all__ = ["LAKH", "format_inr", "format_lakhs"]
