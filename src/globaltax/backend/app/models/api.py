"""Pydantic models describing the public API surface."""

from __future__ import annotations

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel

__all__ = [
    "BracketEntry",
    "CalculationRequest",
    "CalculationResponse",
    "CalculationResult",
    "ComparisonDifferences",
    "ComparisonRequest",
    "ComparisonResponse",
    "ResponseMeta",
    "ValidationSummary",
    "format_validation_error",
]


class _RequestModel(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
        allow_inf_nan=False,
    )


class CalculationRequest(_RequestModel):
    """Salary calculation requested for a single jurisdiction.

    Keys may be sent in snake_case or camelCase. ``additional_params`` is kept
    free-form here and parsed by the jurisdiction's context model.
    """

    country: str = Field(..., min_length=1)
    gross_salary: float
    deductions: dict[str, float] = Field(default_factory=dict)
    regime: str | None = None
    additional_params: dict[str, Any] = Field(default_factory=dict)

    @field_validator("country")
    @classmethod
    def _strip_country(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("country must not be blank")
        return text

    @field_validator("deductions", "additional_params", mode="before")
    @classmethod
    def _default_empty(cls, value: Any) -> Any:
        return {} if value is None else value


class ComparisonRequest(CalculationRequest):
    """Calculation request plus an alternative salary to compare against."""

    what_if_salary: float


class _ResponseModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class BracketEntry(_ResponseModel):
    min: float
    max: float | None
    rate: float
    label: str | None = None
    tax_paid: float


class CalculationResult(_ResponseModel):
    """Rounded calculation output."""

    regime: str
    gross_salary: float
    taxable_income: float
    total_tax: float
    take_home_salary: float
    effective_tax_rate: float
    marginal_tax_rate: float
    brackets: list[BracketEntry]
    additional_taxes: dict[str, float]
    breakdown: dict[str, float]


class ValidationSummary(_ResponseModel):
    is_valid: bool
    errors: list[str]
    warnings: list[str]


class ResponseMeta(_ResponseModel):
    """Metadata returned alongside the calculation output."""

    country: str
    country_name: str
    currency: str
    currency_symbol: str
    tax_year: str


class CalculationResponse(_ResponseModel):
    result: CalculationResult
    validation: ValidationSummary
    meta: ResponseMeta


class ComparisonDifferences(_ResponseModel):
    salary: float
    tax: float
    take_home: float


class ComparisonResponse(_ResponseModel):
    current: CalculationResult
    what_if: CalculationResult
    differences: ComparisonDifferences
    validation: ValidationSummary
    meta: ResponseMeta


def format_validation_error(error: ValidationError) -> str:
    """Return a concise human-readable description of validation issues."""

    messages: list[str] = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue.get("loc", ()))
        message = issue.get("msg", "Invalid value")
        if issue.get("type") == "finite_number":
            message = "value must be a finite number"
        if location:
            messages.append(f"{location}: {message}")
        else:
            messages.append(message)

    details = "; ".join(messages) if messages else str(error)
    return f"Invalid calculation payload: {details}"
