"""Rebates, tiered surcharges and the marginal relief that keeps them smooth."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from globaltax.backend.config.schema import RebateConfig, SurchargeTier


@dataclass(frozen=True)
class RebateOutcome:
    """Tax left after the rebate, the rebate granted and any marginal relief."""

    tax: float
    rebate: float = 0.0
    marginal_relief: float = 0.0


def apply_rebate(
    base_tax: float,
    taxable_income: float,
    rebate: RebateConfig | None,
    *,
    tax_loading: float = 0.0,
) -> RebateOutcome:
    """Apply ``rebate`` to ``base_tax`` computed on ``taxable_income``.

    Unconditional rebates always apply. Threshold rebates apply only when the
    taxable income does not exceed the threshold. Just above the threshold,
    marginal relief caps the tax so that the tax plus ``tax_loading`` (levies
    charged as a fraction of the tax, such as a cess) never exceeds the income
    earned above the threshold.
    """

    if rebate is None:
        return RebateOutcome(tax=base_tax)

    if rebate.threshold is None or taxable_income <= rebate.threshold:
        granted = min(base_tax, rebate.amount)
        return RebateOutcome(tax=max(0.0, base_tax - granted), rebate=granted)

    if not rebate.marginal_relief:
        return RebateOutcome(tax=base_tax)

    ceiling = (taxable_income - rebate.threshold) / (1 + tax_loading)
    if base_tax <= ceiling:
        return RebateOutcome(tax=base_tax)
    return RebateOutcome(tax=ceiling, marginal_relief=base_tax - ceiling)


def tiered_surcharge(
    amount: float, tiers: Sequence[SurchargeTier], *, marginal_relief: bool = False
) -> float:
    """Return the surcharge on ``amount`` using the highest tier it exceeds.

    With marginal relief, the surcharge above a tier threshold never exceeds
    the surcharge at the threshold plus the amount above it.
    """

    applicable = [tier for tier in tiers if amount > tier.threshold]
    if not applicable:
        return 0.0

    tier = applicable[-1]
    charge = amount * tier.rate
    if marginal_relief:
        at_threshold = tiered_surcharge(tier.threshold, tiers, marginal_relief=True)
        charge = min(charge, at_threshold + (amount - tier.threshold))
    return charge


__all__ = ["RebateOutcome", "apply_rebate", "tiered_surcharge"]
