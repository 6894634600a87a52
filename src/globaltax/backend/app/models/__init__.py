"""Request and response models for the HTTP API.

Requests are validated with Pydantic before reaching the engine; responses are
rebuilt through the response models so every endpoint emits the same shape.
"""

from __future__ import annotations

from .api import (
    BracketEntry,
    CalculationRequest,
    CalculationResponse,
    CalculationResult,
    ComparisonDifferences,
    ComparisonRequest,
    ComparisonResponse,
    ResponseMeta,
    ValidationSummary,
    format_validation_error,
)

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
