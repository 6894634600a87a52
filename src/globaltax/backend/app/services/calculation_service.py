"""Orchestrate request validation, strategy lookup and tax calculations.

The service turns loosely typed JSON payloads into engine parameters, runs the
jurisdiction's strategy and rounds the results for transport. Profiling hooks
live here so the engine itself stays free of timing concerns.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from contextlib import contextmanager
from time import perf_counter
from typing import Any, TypeVar

from pydantic import ValidationError

from globaltax.backend.app.models import (
    CalculationRequest,
    CalculationResponse,
    ComparisonRequest,
    ComparisonResponse,
    format_validation_error,
)
from globaltax.backend.engine import (
    TaxCalculationParams,
    TaxCalculationResult,
    TaxStrategy,
    ValidationResult,
    compare_scenarios,
    get_registry,
)
from globaltax.backend.engine.utils import round_currency, round_rate

_LOGGER = logging.getLogger(__name__)

RequestT = TypeVar("RequestT", CalculationRequest, ComparisonRequest)


def _profiling_enabled() -> bool:
    """Return ``True`` when calculation profiling should be captured."""

    flag = os.getenv("GLOBALTAX_PROFILE_CALCULATIONS", "")
    return flag.strip().lower() in {"1", "true", "yes", "on"}


@contextmanager
def _profile_section(name: str, store: dict[str, float] | None):
    """Capture the duration of a named section when profiling is enabled."""

    if store is None:
        yield
        return

    start = perf_counter()
    try:
        yield
    finally:
        store[name] = perf_counter() - start


def _log_timings(operation: str, timings: dict[str, float] | None, start: float | None) -> None:
    if timings is None or start is None:
        return
    timings["total"] = perf_counter() - start
    _LOGGER.debug(
        "%s timings (ms): %s",
        operation,
        {name: round(duration * 1000, 3) for name, duration in timings.items()},
    )


def _parse_request(payload: Mapping[str, Any] | RequestT, model: type[RequestT]) -> RequestT:
    if isinstance(payload, model):
        return payload
    if not isinstance(payload, Mapping):
        raise ValueError("Payload must be a mapping")
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise ValueError(format_validation_error(exc)) from exc


def _build_params(strategy: TaxStrategy, request: CalculationRequest) -> TaxCalculationParams:
    try:
        return strategy.build_params(
            gross_salary=request.gross_salary,
            deductions=request.deductions,
            regime=request.regime,
            additional_params=request.additional_params,
        )
    except ValidationError as exc:
        raise ValueError(format_validation_error(exc)) from exc


def serialise_result(gross_salary: float, result: TaxCalculationResult) -> dict[str, Any]:
    """Round ``result`` for transport: currency to 2 decimals, rates to 4."""

    return {
        "regime": result.regime,
        "gross_salary": round_currency(gross_salary),
        "taxable_income": round_currency(result.taxable_income),
        "total_tax": round_currency(result.total_tax),
        "take_home_salary": round_currency(result.take_home_salary),
        "effective_tax_rate": round_rate(result.effective_tax_rate),
        "marginal_tax_rate": round_rate(result.marginal_tax_rate),
        "brackets": [
            {
                "min": bracket.lower_bound,
                "max": bracket.upper_bound,
                "rate": round_rate(bracket.rate),
                "label": bracket.label,
                "tax_paid": round_currency(bracket.tax_paid),
            }
            for bracket in result.brackets
        ],
        "additional_taxes": {
            key: round_currency(value) for key, value in result.additional_taxes.items()
        },
        "breakdown": {key: round_currency(value) for key, value in result.breakdown.items()},
    }


def _serialise_validation(validation: ValidationResult) -> dict[str, Any]:
    return {
        "is_valid": validation.is_valid,
        "errors": list(validation.errors),
        "warnings": list(validation.warnings),
    }


def _meta(strategy: TaxStrategy) -> dict[str, Any]:
    return {
        "country": strategy.country_code,
        "country_name": strategy.country_name,
        "currency": strategy.currency,
        "currency_symbol": strategy.currency_symbol,
        "tax_year": strategy.tax_year,
    }


def calculate_tax(payload: Mapping[str, Any] | CalculationRequest) -> dict[str, Any]:
    """Validate ``payload``, run the jurisdiction's strategy and serialise the result.

    Raises ``ValueError`` for malformed payloads and
    :class:`~globaltax.backend.engine.UnsupportedJurisdictionError` for
    unknown countries.
    """

    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    overall_start = perf_counter() if timings is not None else None

    with _profile_section("parse", timings):
        request = _parse_request(payload, CalculationRequest)
        strategy = get_registry().require(request.country)
        params = _build_params(strategy, request)

    with _profile_section("validate", timings):
        validation = strategy.validate_params(params)

    with _profile_section("calculate", timings):
        result = strategy.calculate_tax(params)

    _log_timings(f"calculate_tax[{strategy.country_code}]", timings, overall_start)

    response_model = CalculationResponse.model_validate(
        {
            "result": serialise_result(params.gross_salary, result),
            "validation": _serialise_validation(validation),
            "meta": _meta(strategy),
        }
    )
    return response_model.model_dump(mode="json")


def compare_salaries(payload: Mapping[str, Any] | ComparisonRequest) -> dict[str, Any]:
    """Calculate the current salary and a what-if salary side by side."""

    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    overall_start = perf_counter() if timings is not None else None

    with _profile_section("parse", timings):
        request = _parse_request(payload, ComparisonRequest)
        strategy = get_registry().require(request.country)
        params = _build_params(strategy, request)

    with _profile_section("validate", timings):
        validation = strategy.validate_params(params)
        if request.what_if_salary < 0:
            validation = ValidationResult(
                errors=(*validation.errors, "What-if salary cannot be negative"),
                warnings=validation.warnings,
            )

    with _profile_section("compare", timings):
        comparison = compare_scenarios(strategy, params, request.what_if_salary)

    _log_timings(f"compare_salaries[{strategy.country_code}]", timings, overall_start)

    response_model = ComparisonResponse.model_validate(
        {
            "current": serialise_result(params.gross_salary, comparison.current),
            "what_if": serialise_result(request.what_if_salary, comparison.what_if),
            "differences": {
                "salary": round_currency(comparison.salary_difference),
                "tax": round_currency(comparison.tax_difference),
                "take_home": round_currency(comparison.take_home_difference),
            },
            "validation": _serialise_validation(validation),
            "meta": _meta(strategy),
        }
    )
    return response_model.model_dump(mode="json")


__all__ = ["calculate_tax", "compare_salaries", "serialise_result"]
