"""United States federal income tax with FICA and a flat state estimate."""

from __future__ import annotations

from globaltax.backend.config.schema import RegionalLevyConfig

from ..base import TaxStrategy
from ..context import JurisdictionContext, USContext
from ..models import TaxCalculationParams


class UnitedStatesTaxStrategy(TaxStrategy):
    country_code = "US"
    context_model = USContext

    def _state_levy(self) -> RegionalLevyConfig | None:
        for levy in self.configuration.levies:
            if isinstance(levy, RegionalLevyConfig) and levy.selector == "state":
                return levy
        return None

    def _validate_context(
        self,
        params: TaxCalculationParams,
        context: JurisdictionContext,
        regime: str,
        errors: list[str],
        warnings: list[str],
    ) -> None:
        levy = self._state_levy()
        if levy is None or not isinstance(context, USContext) or context.state is None:
            return
        region = levy.resolve_region(context.state)
        if region not in levy.rates and region not in levy.schedules:
            warnings.append(
                f"State '{context.state}' is not recognised; "
                f"using the baseline rate of {levy.default_rate:.0%}"
            )
