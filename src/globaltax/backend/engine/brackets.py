"""Progressive bracket evaluation."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from .models import TaxBracket


class Band(Protocol):
    lower_bound: float
    upper_bound: float | None
    rate: float
    label: str | None


def evaluate(taxable_income: float, brackets: Sequence[Band]) -> tuple[TaxBracket, ...]:
    """Return every band of ``brackets`` with the tax it charges on ``taxable_income``.

    A band contributes nothing when the income does not exceed its lower
    bound, so an income sitting exactly on a boundary belongs to the lower
    band. The input is expected to be non-negative.
    """

    evaluated: list[TaxBracket] = []
    for band in brackets:
        if taxable_income <= band.lower_bound:
            tax_paid = 0.0
        else:
            upper = band.upper_bound if band.upper_bound is not None else taxable_income
            taxed = max(0.0, min(taxable_income, upper) - band.lower_bound)
            tax_paid = taxed * band.rate
        evaluated.append(
            TaxBracket(
                lower_bound=band.lower_bound,
                upper_bound=band.upper_bound,
                rate=band.rate,
                label=band.label,
                tax_paid=tax_paid,
            )
        )
    return tuple(evaluated)


def total_bracket_tax(brackets: Sequence[TaxBracket]) -> float:
    return sum(bracket.tax_paid for bracket in brackets)


def progressive_tax(amount: float, brackets: Sequence[Band]) -> float:
    """Shortcut returning only the total tax ``brackets`` charge on ``amount``."""

    if amount <= 0:
        return 0.0
    return total_bracket_tax(evaluate(amount, brackets))


def marginal_rate(taxable_income: float, brackets: Sequence[Band]) -> float:
    """Return the rate, as a percentage, of the band containing ``taxable_income``."""

    if taxable_income <= 0:
        return 0.0
    for band in brackets:
        if taxable_income <= band.lower_bound:
            continue
        if band.upper_bound is None or taxable_income <= band.upper_bound:
            return band.rate * 100
    return 0.0


__all__ = ["Band", "evaluate", "marginal_rate", "progressive_tax", "total_bracket_tax"]
