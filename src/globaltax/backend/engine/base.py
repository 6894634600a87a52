"""Shared strategy base composing brackets, deductions, rebates and levies."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar

from globaltax.backend.config.jurisdiction_config import (
    DeductionFieldConfig,
    JurisdictionConfiguration,
    load_jurisdiction_configuration,
)
from globaltax.backend.config.schema import PercentageLevyConfig

from .brackets import evaluate, marginal_rate, total_bracket_tax
from .context import EmptyContext, JurisdictionContext
from .deductions import cap_deductions, field_applies
from .levies import LevyContext, LevyDefinition, build_levy, evaluate_levies
from .models import TaxBracket, TaxCalculationParams, TaxCalculationResult, ValidationResult
from .rebates import apply_rebate
from .utils import format_percentage

_LOGGER = logging.getLogger(__name__)


class TaxStrategy(ABC):
    """Tax rules for one jurisdiction.

    The rule tables come from the jurisdiction's configuration file; subclasses
    pick the context model and add country-specific validation. Strategies are
    stateless after construction and safe to share between threads.
    """

    context_model: ClassVar[type[JurisdictionContext]] = EmptyContext

    def __init__(self, configuration: JurisdictionConfiguration | None = None) -> None:
        self._config = configuration or load_jurisdiction_configuration(self.country_code)
        if self._config.code.upper() != self.country_code:
            raise ValueError(
                f"{type(self).__name__} cannot use configuration for {self._config.code}"
            )
        self._levies = tuple(build_levy(levy) for levy in self._config.levies)
        _LOGGER.debug(
            "Loaded %s rules for tax year %s (%d levies)",
            self.country_code,
            self._config.tax_year,
            len(self._levies),
        )

    @property
    @abstractmethod
    def country_code(self) -> str:
        """ISO-style code identifying the jurisdiction."""

    @property
    def configuration(self) -> JurisdictionConfiguration:
        return self._config

    @property
    def country_name(self) -> str:
        return self._config.name

    @property
    def currency(self) -> str:
        return self._config.currency

    @property
    def currency_symbol(self) -> str:
        return self._config.currency_symbol

    @property
    def tax_year(self) -> str:
        return self._config.tax_year

    @property
    def regimes(self) -> tuple[str, ...]:
        return tuple(self._config.regimes.accepted)

    @property
    def default_regime(self) -> str:
        return self._config.regimes.default

    @property
    def regime_label(self) -> str:
        return str(self._config.meta.get("regime_label", "Regime"))

    # ------------------------------------------------------------------
    # Context and parameter construction
    # ------------------------------------------------------------------
    def build_context(self, additional_params: Mapping[str, Any] | None = None) -> JurisdictionContext:
        """Parse free-form ``additional_params`` into this jurisdiction's context model.

        Raises :class:`pydantic.ValidationError` for malformed values.
        """

        return self.context_model.model_validate(dict(additional_params or {}))

    def build_params(
        self,
        gross_salary: float,
        deductions: Mapping[str, float] | None = None,
        regime: str | None = None,
        additional_params: Mapping[str, Any] | None = None,
    ) -> TaxCalculationParams:
        return TaxCalculationParams(
            gross_salary=gross_salary,
            deductions=dict(deductions or {}),
            regime=regime,
            context=self.build_context(additional_params),
        )

    def _coerce_context(self, context: JurisdictionContext | None) -> JurisdictionContext:
        if context is None:
            return self.context_model()
        if not isinstance(context, self.context_model):
            raise TypeError(
                f"{self.country_code} expects {self.context_model.__name__}, "
                f"got {type(context).__name__}"
            )
        return context

    def resolve_regime(
        self, regime: str | None, context: JurisdictionContext | None = None
    ) -> str:
        """Return the regime to calculate under, falling back to the default.

        Both the explicit regime and the context hint are normalised and may
        use the aliases declared in the rule file (for example province codes).
        """

        regimes = self._config.regimes
        hint = context.regime_hint() if context is not None else None
        for candidate in (regimes.canonical(regime), regimes.canonical(hint)):
            if candidate is not None and candidate in regimes.accepted:
                return candidate
        return self.default_regime

    # ------------------------------------------------------------------
    # Rule accessors
    # ------------------------------------------------------------------
    def get_brackets(self, regime: str | None = None) -> tuple[TaxBracket, ...]:
        schedule = self._config.brackets_for(self.resolve_regime(regime))
        return tuple(
            TaxBracket(
                lower_bound=band.lower_bound,
                upper_bound=band.upper_bound,
                rate=band.rate,
                label=band.label,
            )
            for band in schedule
        )

    def get_deductions(self, regime: str | None = None) -> tuple[DeductionFieldConfig, ...]:
        resolved = self.resolve_regime(regime)
        return tuple(field for field in self._config.deductions if field_applies(field, resolved))

    def get_max_deductions(self, regime: str | None = None) -> dict[str, float | None]:
        return {field.key: field.max_value for field in self.get_deductions(regime)}

    def get_additional_taxes(self, regime: str | None = None) -> tuple[LevyDefinition, ...]:
        if regime is None:
            return self._levies
        resolved = self.resolve_regime(regime)
        return tuple(levy for levy in self._levies if levy.applies_to(resolved))

    def tax_loading(self, regime: str) -> float:
        """Return the combined rate of flat levies charged on the income tax."""

        return sum(
            levy.rate
            for levy in self._config.levies
            if isinstance(levy, PercentageLevyConfig)
            and levy.base == "tax"
            and levy.max_amount is None
            and (not levy.applicable_regimes or regime in levy.applicable_regimes)
        )

    # ------------------------------------------------------------------
    # Calculation
    # ------------------------------------------------------------------
    def calculate_tax(self, params: TaxCalculationParams) -> TaxCalculationResult:
        """Calculate the tax owed for ``params``.

        Inputs are clamped rather than rejected: a negative salary is treated
        as zero income and negative deductions as zero. Use
        :meth:`validate_params` to report such issues.
        """

        context = self._coerce_context(params.context)
        regime = self.resolve_regime(params.regime, context)
        gross = max(0.0, params.gross_salary)

        applied = cap_deductions(params.deductions, self._config.deductions, regime)
        allowance = self._config.allowance_for(regime)
        total_deductions = sum(applied.values()) + (allowance.amount if allowance else 0.0)
        taxable_income = max(0.0, gross - total_deductions)

        schedule = self._config.brackets_for(regime)
        brackets = evaluate(taxable_income, schedule)
        base_tax = total_bracket_tax(brackets)

        rebate = self._config.rebate_for(regime)
        outcome = apply_rebate(
            base_tax, taxable_income, rebate, tax_loading=self.tax_loading(regime)
        )

        levy_context = LevyContext(
            gross_salary=gross,
            taxable_income=taxable_income,
            base_tax=outcome.tax,
            regime=regime,
            context=context,
        )
        additional_taxes = evaluate_levies(self._levies, levy_context)

        total_tax = outcome.tax + sum(additional_taxes.values())

        breakdown: dict[str, float] = {"income_tax": outcome.tax}
        breakdown.update(additional_taxes)
        if allowance is not None:
            breakdown[allowance.key] = allowance.amount
        breakdown["total_deductions"] = total_deductions
        if rebate is not None:
            breakdown[rebate.key] = outcome.rebate
            if rebate.marginal_relief:
                breakdown["marginal_relief"] = outcome.marginal_relief

        effective = total_tax / params.gross_salary * 100 if params.gross_salary > 0 else 0.0

        return TaxCalculationResult(
            brackets=brackets,
            total_tax=total_tax,
            take_home_salary=params.gross_salary - total_tax,
            taxable_income=taxable_income,
            additional_taxes=additional_taxes,
            breakdown=breakdown,
            effective_tax_rate=effective,
            marginal_tax_rate=marginal_rate(taxable_income, schedule),
            regime=regime,
        )

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    def validate_params(self, params: TaxCalculationParams) -> ValidationResult:
        """Report problems with ``params`` without raising."""

        errors: list[str] = []
        warnings: list[str] = []

        if params.gross_salary < 0:
            errors.append("Gross salary cannot be negative")
        elif params.gross_salary == 0:
            warnings.append("Gross salary is zero; no tax is due")

        context = params.context if params.context is not None else self.context_model()
        regime = self.resolve_regime(params.regime, context)
        regimes = self._config.regimes

        # Jurisdictions without a choice of regime ignore whatever was sent.
        if regimes.requires_selection:
            for supplied in (params.regime, context.regime_hint()):
                candidate = regimes.canonical(supplied)
                if candidate is not None and candidate not in regimes.accepted:
                    errors.append(
                        f"Unrecognised {self.regime_label.lower()} '{supplied}'; "
                        f"using '{regime}'"
                    )

        fields = {field.key: field for field in self._config.deductions}
        for key, value in params.deductions.items():
            field = fields.get(key)
            if field is None:
                warnings.append(f"Deduction '{key}' is not recognised and will be ignored")
                continue
            if value < 0:
                errors.append(f"{field.label} cannot be negative")
                continue
            if value > 0 and not field_applies(field, regime):
                warnings.append(
                    f"{field.label} does not apply under the '{regime}' "
                    f"{self.regime_label.lower()} and will be ignored"
                )
                continue
            if field.max_value is not None and value > field.max_value:
                warnings.append(
                    f"{field.label} exceeds the maximum of "
                    f"{self.currency_symbol}{field.max_value:,.2f} and will be capped"
                )

        self._validate_context(params, context, regime, errors, warnings)

        return ValidationResult(errors=tuple(errors), warnings=tuple(warnings))

    def _validate_context(
        self,
        params: TaxCalculationParams,
        context: JurisdictionContext,
        regime: str,
        errors: list[str],
        warnings: list[str],
    ) -> None:
        """Hook for jurisdiction-specific checks; appends to ``errors``/``warnings``."""

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------
    def describe(self, regime: str | None = None) -> dict[str, Any]:
        """Return the rule metadata a UI needs to render forms for ``regime``."""

        resolved = self.resolve_regime(regime)
        allowance = self._config.allowance_for(resolved)
        rebate = self._config.rebate_for(resolved)
        return {
            "code": self.country_code,
            "name": self.country_name,
            "currency": self.currency,
            "currency_symbol": self.currency_symbol,
            "tax_year": self.tax_year,
            "regime": resolved,
            "regimes": list(self.regimes),
            "default_regime": self.default_regime,
            "regime_label": self.regime_label,
            "summary": self._config.meta.get("summary"),
            "brackets": [
                {
                    "min": bracket.lower_bound,
                    "max": bracket.upper_bound,
                    "rate": bracket.rate,
                    "rate_label": format_percentage(bracket.rate),
                    "label": bracket.label,
                }
                for bracket in self.get_brackets(resolved)
            ],
            "deductions": [
                {
                    "key": field.key,
                    "label": field.label,
                    "max_value": field.max_value,
                    "tooltip": field.tooltip,
                }
                for field in self.get_deductions(resolved)
            ],
            "max_deductions": self.get_max_deductions(resolved),
            "additional_taxes": [
                {"key": levy.key, "label": levy.label, "tooltip": levy.tooltip}
                for levy in self.get_additional_taxes(resolved)
            ],
            "allowance": (
                {"key": allowance.key, "label": allowance.label, "amount": allowance.amount}
                if allowance is not None
                else None
            ),
            "rebate": (
                {
                    "key": rebate.key,
                    "label": rebate.label,
                    "amount": rebate.amount,
                    "threshold": rebate.threshold,
                }
                if rebate is not None
                else None
            ),
        }

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.country_code} {self.tax_year}>"


__all__ = ["TaxStrategy"]
