"""Per-jurisdiction salary tax engine."""

from .base import TaxStrategy
from .comparison import compare_scenarios
from .context import (
    CanadaContext,
    EmptyContext,
    GermanyContext,
    JurisdictionContext,
    UKContext,
    USContext,
)
from .levies import LevyContext, LevyDefinition
from .models import (
    ScenarioComparison,
    TaxBracket,
    TaxCalculationParams,
    TaxCalculationResult,
    ValidationResult,
)
from .registry import (
    RegistryFrozenError,
    StrategyRegistry,
    UnsupportedJurisdictionError,
    build_registry,
    get_registry,
)

__all__ = [
    "CanadaContext",
    "EmptyContext",
    "GermanyContext",
    "JurisdictionContext",
    "LevyContext",
    "LevyDefinition",
    "RegistryFrozenError",
    "ScenarioComparison",
    "StrategyRegistry",
    "TaxBracket",
    "TaxCalculationParams",
    "TaxCalculationResult",
    "TaxStrategy",
    "UKContext",
    "USContext",
    "UnsupportedJurisdictionError",
    "ValidationResult",
    "build_registry",
    "compare_scenarios",
    "get_registry",
]
