"""United Kingdom income tax by nation, National Insurance and student loans."""

from __future__ import annotations

from ..base import TaxStrategy
from ..context import JurisdictionContext, UKContext
from ..models import TaxCalculationParams

ALLOWANCE_TAPER_THRESHOLD = 100_000


class UnitedKingdomTaxStrategy(TaxStrategy):
    country_code = "UK"
    context_model = UKContext

    def _validate_context(
        self,
        params: TaxCalculationParams,
        context: JurisdictionContext,
        regime: str,
        errors: list[str],
        warnings: list[str],
    ) -> None:
        if params.gross_salary > ALLOWANCE_TAPER_THRESHOLD:
            warnings.append(
                "The personal allowance taper above £100,000 is not modelled; "
                "income tax may be understated"
            )
