"""Typed inputs and results exchanged with the tax strategies.

Calculation inputs are frozen Pydantic models so that callers get validation of
the salary and deduction amounts for free, while derived results are
lightweight frozen dataclasses: they are produced by trusted engine code and
only need to be read and serialised.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .context import JurisdictionContext


class TaxCalculationParams(BaseModel):
    """Salary, user deductions and optional regime/context for one calculation."""

    model_config = ConfigDict(frozen=True, extra="forbid", allow_inf_nan=False)

    gross_salary: float
    deductions: Mapping[str, float] = Field(default_factory=dict)
    regime: str | None = None
    context: JurisdictionContext | None = None

    @field_validator("regime", mode="before")
    @classmethod
    def _normalise_regime(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip().lower()
        return text or None


@dataclass(frozen=True)
class TaxBracket:
    """A band of a schedule together with the tax it contributed."""

    lower_bound: float
    upper_bound: float | None
    rate: float
    label: str | None = None
    tax_paid: float = 0.0

    def contains(self, amount: float) -> bool:
        """Return ``True`` when ``amount`` falls within ``(lower, upper]``."""

        if amount <= self.lower_bound:
            return False
        return self.upper_bound is None or amount <= self.upper_bound


@dataclass(frozen=True)
class TaxCalculationResult:
    brackets: tuple[TaxBracket, ...]
    total_tax: float
    take_home_salary: float
    taxable_income: float
    additional_taxes: Mapping[str, float]
    breakdown: Mapping[str, float]
    effective_tax_rate: float
    marginal_tax_rate: float
    regime: str

    @property
    def income_tax(self) -> float:
        return self.breakdown.get("income_tax", 0.0)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of parameter validation; issues are reported, never raised."""

    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    is_valid: bool = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "is_valid", not self.errors)


@dataclass(frozen=True)
class ScenarioComparison:
    """Current salary against a what-if salary; differences are what-if minus current."""

    current: TaxCalculationResult
    what_if: TaxCalculationResult
    salary_difference: float
    tax_difference: float
    take_home_difference: float


__all__ = [
    "ScenarioComparison",
    "TaxBracket",
    "TaxCalculationParams",
    "TaxCalculationResult",
    "ValidationResult",
]
