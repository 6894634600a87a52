"""Rounding and formatting helpers shared by the engine and API layers."""

from __future__ import annotations


def format_percentage(value: float) -> str:
    """Return a human-readable percentage label for the fractional ``value``."""

    percentage = value * 100
    if float(int(percentage)) == percentage:
        return f"{int(percentage)}%"
    return f"{percentage:.2f}%"


def round_currency(value: float) -> float:
    """Round monetary amounts to two decimals."""

    return round(value, 2)


def round_rate(value: float) -> float:
    """Round rate values to four decimals."""

    return round(value, 4)
