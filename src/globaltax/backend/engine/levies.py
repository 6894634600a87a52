"""Additional levies charged on top of income tax.

Each configured levy becomes a :class:`LevyDefinition` holding a pure
``compute`` function of the :class:`LevyContext`. The levy ``base`` selects
gross salary, taxable income or the income tax left after rebates.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from globaltax.backend.config.schema import (
    LevyConfig,
    PercentageLevyConfig,
    PlanLevyConfig,
    ProgressiveLevyConfig,
    RegionalLevyConfig,
    SurtaxLevyConfig,
    TieredLevyConfig,
)

from .brackets import progressive_tax
from .context import EmptyContext, JurisdictionContext
from .rebates import tiered_surcharge


@dataclass(frozen=True)
class LevyContext:
    gross_salary: float
    taxable_income: float
    base_tax: float
    regime: str
    context: JurisdictionContext = field(default_factory=EmptyContext)

    def base_amount(self, base: str) -> float:
        if base == "taxable":
            value = self.taxable_income
        elif base == "tax":
            value = self.base_tax
        else:
            value = self.gross_salary
        return max(0.0, value)

    def lookup(self, selector: str) -> Any:
        if selector == "regime":
            return self.regime
        return getattr(self.context, selector, None)


@dataclass(frozen=True)
class LevyDefinition:
    key: str
    label: str
    compute: Callable[[LevyContext], float]
    tooltip: str | None = None
    applicable_regimes: tuple[str, ...] = ()

    def applies_to(self, regime: str) -> bool:
        return not self.applicable_regimes or regime in self.applicable_regimes


def _percentage(config: PercentageLevyConfig) -> Callable[[LevyContext], float]:
    def compute(ctx: LevyContext) -> float:
        base = ctx.base_amount(config.base)
        if config.wage_cap is not None:
            base = min(base, config.wage_cap)
        amount = base * config.rate
        if config.max_amount is not None:
            amount = min(amount, config.max_amount)
        return amount

    return compute


def _surtax(config: SurtaxLevyConfig) -> Callable[[LevyContext], float]:
    def compute(ctx: LevyContext) -> float:
        base = ctx.base_amount(config.base)
        threshold = config.threshold_for(ctx.regime)
        return base * config.rate + max(0.0, base - threshold) * config.additional_rate

    return compute


def _progressive(config: ProgressiveLevyConfig) -> Callable[[LevyContext], float]:
    def compute(ctx: LevyContext) -> float:
        return progressive_tax(ctx.base_amount(config.base), config.brackets)

    return compute


def _tiered(config: TieredLevyConfig) -> Callable[[LevyContext], float]:
    def compute(ctx: LevyContext) -> float:
        return tiered_surcharge(
            ctx.base_amount(config.base),
            config.tiers,
            marginal_relief=config.marginal_relief,
        )

    return compute


def _regional(config: RegionalLevyConfig) -> Callable[[LevyContext], float]:
    def compute(ctx: LevyContext) -> float:
        if config.condition is not None and not getattr(ctx.context, config.condition, False):
            return 0.0
        base = ctx.base_amount(config.base)
        region = config.resolve_region(ctx.lookup(config.selector))
        if region is not None and region in config.schedules:
            return progressive_tax(base, config.schedules[region])
        if region is not None and region in config.rates:
            return base * config.rates[region]
        return base * config.default_rate

    return compute


def _plan(config: PlanLevyConfig) -> Callable[[LevyContext], float]:
    def compute(ctx: LevyContext) -> float:
        plan = config.plans.get(ctx.lookup(config.selector) or "")
        if plan is None:
            return 0.0
        return max(0.0, ctx.base_amount(config.base) - plan.threshold) * plan.rate

    return compute


_BUILDERS: dict[type, Callable[[Any], Callable[[LevyContext], float]]] = {
    PercentageLevyConfig: _percentage,
    SurtaxLevyConfig: _surtax,
    ProgressiveLevyConfig: _progressive,
    TieredLevyConfig: _tiered,
    RegionalLevyConfig: _regional,
    PlanLevyConfig: _plan,
}


def build_levy(config: LevyConfig) -> LevyDefinition:
    """Turn a levy configuration entry into a :class:`LevyDefinition`."""

    try:
        builder = _BUILDERS[type(config)]
    except KeyError as exc:
        raise TypeError(f"Unsupported levy configuration: {type(config).__name__}") from exc

    return LevyDefinition(
        key=config.key,
        label=config.label,
        compute=builder(config),
        tooltip=config.tooltip,
        applicable_regimes=tuple(config.applicable_regimes),
    )


def evaluate_levies(
    definitions: Sequence[LevyDefinition], context: LevyContext
) -> dict[str, float]:
    """Return the amount of every levy applicable to the context's regime."""

    return {
        definition.key: definition.compute(context)
        for definition in definitions
        if definition.applies_to(context.regime)
    }


__all__ = [
    "LevyContext",
    "LevyDefinition",
    "build_levy",
    "evaluate_levies",
]
