"""What-if comparison between the current and an alternative salary."""

from __future__ import annotations

from .base import TaxStrategy
from .models import ScenarioComparison, TaxCalculationParams


def compare_scenarios(
    strategy: TaxStrategy, params: TaxCalculationParams, what_if_salary: float
) -> ScenarioComparison:
    """Calculate ``params`` and the same inputs at ``what_if_salary``."""

    what_if_params = params.model_copy(update={"gross_salary": float(what_if_salary)})
    current = strategy.calculate_tax(params)
    what_if = strategy.calculate_tax(what_if_params)
    return ScenarioComparison(
        current=current,
        what_if=what_if,
        salary_difference=what_if_params.gross_salary - params.gross_salary,
        tax_difference=what_if.total_tax - current.total_tax,
        take_home_difference=what_if.take_home_salary - current.take_home_salary,
    )


__all__ = ["compare_scenarios"]
