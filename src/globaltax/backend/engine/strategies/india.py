"""India income tax under the new and old regimes.

The Section 87A rebate removes the tax entirely up to its threshold. Above it
the rebate is withdrawn, but marginal relief limits tax plus cess to the
income earned above the threshold so take-home pay never drops when salary
rises. The surcharge tiers carry their own marginal relief.
"""

from __future__ import annotations

from ..base import TaxStrategy
from ..context import JurisdictionContext
from ..models import TaxCalculationParams


class IndiaTaxStrategy(TaxStrategy):
    country_code = "IN"

    def _validate_context(
        self,
        params: TaxCalculationParams,
        context: JurisdictionContext,
        regime: str,
        errors: list[str],
        warnings: list[str],
    ) -> None:
        if regime == "new" and any(value > 0 for value in params.deductions.values()):
            warnings.append(
                "Chapter VI-A deductions are not available under the new regime; "
                "compare with the old regime to see their effect"
            )
