"""Pydantic models describing the jurisdiction rule configuration schema."""

from __future__ import annotations

from typing import Annotated, Any, Iterable, Literal, Mapping, Sequence, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    computed_field,
    field_validator,
    model_validator,
)
from typing_extensions import Self

DEFAULT_SCHEDULE = "default"


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


def _coerce_string_tuple(value: Any, field_name: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Iterable):
        return tuple(str(entry) for entry in value)
    raise ConfigurationError(f"'{field_name}' must be an iterable of strings")


def _normalise_key(value: str) -> str:
    return value.strip().casefold()


def _normalise_regime_key(value: str) -> str:
    return "-".join(value.strip().casefold().replace("_", " ").split())


class BracketDefinition(ImmutableModel):
    """A single band of a progressive schedule."""

    lower_bound: float = Field(default=0.0, alias="min")
    upper_bound: float | None = Field(default=None, alias="max")
    rate: float
    label: str | None = None

    @model_validator(mode="after")
    def _validate_values(self) -> BracketDefinition:
        if self.rate < 0 or self.rate > 1:
            raise ConfigurationError("Bracket rates must be between 0 and 1")
        if self.lower_bound < 0:
            raise ConfigurationError("Bracket lower bounds must be non-negative")
        if self.upper_bound is not None and self.upper_bound <= self.lower_bound:
            raise ConfigurationError("Bracket upper bounds must exceed their lower bound")
        return self


def validate_bracket_sequence(brackets: Sequence[BracketDefinition]) -> None:
    """Ensure ``brackets`` are contiguous, ascending and end open-ended."""

    if not brackets:
        raise ConfigurationError("At least one tax bracket must be defined")
    if brackets[0].lower_bound != 0:
        raise ConfigurationError("The first tax bracket must start at zero")
    previous_upper: float | None = None
    for index, bracket in enumerate(brackets):
        if index and bracket.lower_bound != previous_upper:
            raise ConfigurationError(
                "Tax brackets must be contiguous and in ascending order"
            )
        if bracket.upper_bound is None and index != len(brackets) - 1:
            raise ConfigurationError("Only the final tax bracket may be open-ended")
        previous_upper = bracket.upper_bound
    if brackets[-1].upper_bound is not None:
        raise ConfigurationError("Final tax bracket must have an open upper bound")


class RegimeConfig(ImmutableModel):
    """Regimes accepted by a jurisdiction and how they map onto schedules."""

    default: str = DEFAULT_SCHEDULE
    accepted: Sequence[str] = Field(default=(DEFAULT_SCHEDULE,))
    schedules: Mapping[str, str] = Field(default_factory=dict)
    aliases: Mapping[str, str] = Field(default_factory=dict)

    @field_validator("accepted", mode="before")
    @classmethod
    def _coerce_accepted(cls, value: Any) -> Sequence[str]:
        return _coerce_string_tuple(value, "accepted")

    @field_validator("aliases", mode="before")
    @classmethod
    def _normalise_aliases(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return {_normalise_regime_key(str(key)): str(target) for key, target in value.items()}
        return value

    @model_validator(mode="after")
    def _validate_regimes(self) -> RegimeConfig:
        if not self.accepted:
            raise ConfigurationError("At least one regime must be accepted")
        if self.default not in self.accepted:
            raise ConfigurationError(
                f"Default regime '{self.default}' must be listed in the accepted set"
            )
        for regime in self.schedules:
            if regime not in self.accepted:
                raise ConfigurationError(
                    f"Schedule alias declared for unknown regime '{regime}'"
                )
        for alias, target in self.aliases.items():
            if target not in self.accepted:
                raise ConfigurationError(
                    f"Regime alias '{alias}' points to unknown regime '{target}'"
                )
        return self

    def schedule_for(self, regime: str) -> str:
        return self.schedules.get(regime, regime)

    @property
    def requires_selection(self) -> bool:
        """Whether callers choose between several regimes."""

        return len(self.accepted) > 1

    def canonical(self, value: str | None) -> str | None:
        """Normalise ``value`` and map aliases such as province codes onto regimes."""

        if value is None:
            return None
        key = _normalise_regime_key(str(value))
        if not key:
            return None
        return self.aliases.get(key, key)


class AllowanceConfig(ImmutableModel):
    """Fixed, non-editable allowance folded into the deduction total."""

    key: str
    label: str
    amount: float

    @model_validator(mode="after")
    def _validate_amount(self) -> AllowanceConfig:
        if self.amount < 0:
            raise ConfigurationError("Allowance amounts must be non-negative")
        return self


class RebateConfig(ImmutableModel):
    """Post-bracket rebate, optionally gated on a taxable income threshold."""

    key: str = "rebate"
    label: str
    amount: float
    threshold: float | None = None
    marginal_relief: bool = False

    @model_validator(mode="after")
    def _validate_rebate(self) -> RebateConfig:
        if self.amount < 0:
            raise ConfigurationError("Rebate amounts must be non-negative")
        if self.threshold is not None and self.threshold < 0:
            raise ConfigurationError("Rebate thresholds must be non-negative")
        if self.marginal_relief and self.threshold is None:
            raise ConfigurationError("Marginal relief requires a rebate threshold")
        return self

    @property
    def unconditional(self) -> bool:
        return self.threshold is None


class DeductionFieldConfig(ImmutableModel):
    """User-editable deduction input exposed by a jurisdiction."""

    key: str
    label: str
    max_value: float | None = None
    tooltip: str | None = None
    applicable_regimes: Sequence[str] = Field(default_factory=tuple)

    @field_validator("applicable_regimes", mode="before")
    @classmethod
    def _coerce_regimes(cls, value: Any) -> Sequence[str]:
        return _coerce_string_tuple(value, "applicable_regimes")

    @model_validator(mode="after")
    def _validate_cap(self) -> DeductionFieldConfig:
        if self.max_value is not None and self.max_value < 0:
            raise ConfigurationError("Deduction caps must be non-negative")
        return self


LevyBase = Literal["gross", "taxable", "tax"]


class _LevyConfigBase(ImmutableModel):
    key: str
    label: str
    tooltip: str | None = None
    applicable_regimes: Sequence[str] = Field(default_factory=tuple)

    @field_validator("applicable_regimes", mode="before")
    @classmethod
    def _coerce_regimes(cls, value: Any) -> Sequence[str]:
        return _coerce_string_tuple(value, "applicable_regimes")


class PercentageLevyConfig(_LevyConfigBase):
    """Flat rate on a base, optionally capped on the base or the result."""

    kind: Literal["percentage"] = "percentage"
    base: LevyBase = "gross"
    rate: float
    wage_cap: float | None = None
    max_amount: float | None = None

    @model_validator(mode="after")
    def _validate_caps(self) -> PercentageLevyConfig:
        if self.wage_cap is not None and self.wage_cap < 0:
            raise ConfigurationError(f"Levy '{self.key}' wage cap must be non-negative")
        if self.max_amount is not None and self.max_amount < 0:
            raise ConfigurationError(f"Levy '{self.key}' max amount must be non-negative")
        return self


class SurtaxLevyConfig(_LevyConfigBase):
    """Flat rate plus an additional rate above a regime-dependent threshold."""

    kind: Literal["surtax"] = "surtax"
    base: LevyBase = "gross"
    rate: float
    additional_rate: float
    threshold: float
    regime_thresholds: Mapping[str, float] = Field(default_factory=dict)

    def threshold_for(self, regime: str | None) -> float:
        if regime is not None and regime in self.regime_thresholds:
            return self.regime_thresholds[regime]
        return self.threshold


class ProgressiveLevyConfig(_LevyConfigBase):
    """Levy charged on its own progressive schedule."""

    kind: Literal["progressive"] = "progressive"
    base: LevyBase = "gross"
    brackets: Sequence[BracketDefinition]

    @model_validator(mode="after")
    def _validate_schedule(self) -> ProgressiveLevyConfig:
        validate_bracket_sequence(self.brackets)
        return self


class SurchargeTier(ImmutableModel):
    """Tier of a surcharge, applied once the base exceeds ``threshold``."""

    threshold: float
    rate: float


class TieredLevyConfig(_LevyConfigBase):
    """Surcharge whose rate depends on which tier the base falls into."""

    kind: Literal["tiered"] = "tiered"
    base: LevyBase = "tax"
    tiers: Sequence[SurchargeTier]
    marginal_relief: bool = False

    @model_validator(mode="after")
    def _validate_tiers(self) -> TieredLevyConfig:
        if not self.tiers:
            raise ConfigurationError(f"Levy '{self.key}' must define at least one tier")
        thresholds = [tier.threshold for tier in self.tiers]
        if thresholds != sorted(set(thresholds)):
            raise ConfigurationError(
                f"Levy '{self.key}' tiers must have strictly ascending thresholds"
            )
        return self


class RegionalLevyConfig(_LevyConfigBase):
    """Levy whose rate or schedule depends on a region selector.

    ``selector`` names either ``regime`` or an attribute of the calculation
    context. Regions with a schedule are taxed progressively; all others use
    their flat rate, falling back to ``default_rate``.
    """

    kind: Literal["regional"] = "regional"
    base: LevyBase = "gross"
    selector: str
    rates: Mapping[str, float] = Field(default_factory=dict)
    schedules: Mapping[str, Sequence[BracketDefinition]] = Field(default_factory=dict)
    aliases: Mapping[str, str] = Field(default_factory=dict)
    default_rate: float = 0.0
    condition: str | None = None

    @field_validator("rates", "aliases", mode="before")
    @classmethod
    def _normalise_region_keys(cls, value: Any) -> Mapping[str, Any]:
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise ConfigurationError("Regional rates and aliases must be mappings")
        return {_normalise_key(str(key)): val for key, val in value.items()}

    @field_validator("schedules", mode="before")
    @classmethod
    def _normalise_schedule_keys(cls, value: Any) -> Mapping[str, Any]:
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise ConfigurationError("Regional schedules must be a mapping")
        return {_normalise_key(str(key)): val for key, val in value.items()}

    @model_validator(mode="after")
    def _validate_schedules(self) -> RegionalLevyConfig:
        for brackets in self.schedules.values():
            validate_bracket_sequence(brackets)
        return self

    def resolve_region(self, value: str | None) -> str | None:
        if value is None or not str(value).strip():
            return None
        region = _normalise_key(str(value))
        return _normalise_key(self.aliases.get(region, region))


class RepaymentPlan(ImmutableModel):
    """Threshold and rate of an income-contingent repayment plan."""

    threshold: float
    rate: float


class PlanLevyConfig(_LevyConfigBase):
    """Repayment charged above a plan threshold when the caller selects a plan."""

    kind: Literal["plan"] = "plan"
    base: LevyBase = "gross"
    selector: str
    plans: Mapping[str, RepaymentPlan]

    @model_validator(mode="after")
    def _validate_plans(self) -> PlanLevyConfig:
        if not self.plans:
            raise ConfigurationError(f"Levy '{self.key}' must define at least one plan")
        return self


LevyConfig = Annotated[
    Union[
        PercentageLevyConfig,
        SurtaxLevyConfig,
        ProgressiveLevyConfig,
        TieredLevyConfig,
        RegionalLevyConfig,
        PlanLevyConfig,
    ],
    Field(discriminator="kind"),
]


class JurisdictionConfiguration(ImmutableModel):
    """Structured representation of one jurisdiction's rule set."""

    code: str
    name: str
    currency: str
    currency_symbol: str
    tax_year: str
    meta: Mapping[str, Any] = Field(default_factory=dict)
    regimes: RegimeConfig = Field(default_factory=RegimeConfig)
    brackets: Mapping[str, Sequence[BracketDefinition]]
    allowances: Mapping[str, AllowanceConfig] = Field(default_factory=dict)
    rebates: Mapping[str, RebateConfig] = Field(default_factory=dict)
    deductions: Sequence[DeductionFieldConfig] = Field(default_factory=tuple)
    levies: Sequence[LevyConfig] = Field(default_factory=tuple)

    @model_validator(mode="before")
    @classmethod
    def _prepare(cls, data: Any) -> Mapping[str, Any]:
        if not isinstance(data, Mapping):
            raise ConfigurationError("Configuration file must define a mapping at the top level")

        prepared = dict(data)
        if prepared.get("meta") is None:
            prepared["meta"] = {}
        elif not isinstance(prepared["meta"], Mapping):
            raise ConfigurationError("'meta' section must be a mapping if provided")

        brackets = prepared.get("brackets")
        if isinstance(brackets, Sequence) and not isinstance(brackets, str):
            prepared["brackets"] = {DEFAULT_SCHEDULE: brackets}
        elif not isinstance(brackets, Mapping):
            raise ConfigurationError("Configuration must include a 'brackets' section")

        for section in ("allowances", "rebates"):
            payload = prepared.get(section)
            if payload is None:
                prepared[section] = {}
            elif isinstance(payload, Mapping) and "label" in payload:
                prepared[section] = {DEFAULT_SCHEDULE: payload}

        for section in ("deductions", "levies"):
            if prepared.get(section) is None:
                prepared[section] = []

        if "tax_year" in prepared:
            prepared["tax_year"] = str(prepared["tax_year"])

        return prepared

    @model_validator(mode="after")
    def _validate_jurisdiction(self) -> Self:
        for brackets in self.brackets.values():
            validate_bracket_sequence(brackets)

        for regime in self.regimes.accepted:
            if self._select(self.brackets, regime) is None:
                raise ConfigurationError(
                    f"No bracket schedule resolves for regime '{regime}'"
                )

        seen: set[str] = set()
        for field in self.deductions:
            if field.key in seen:
                raise ConfigurationError(f"Duplicate deduction key '{field.key}'")
            seen.add(field.key)

        seen.clear()
        for levy in self.levies:
            if levy.key in seen:
                raise ConfigurationError(f"Duplicate levy key '{levy.key}'")
            seen.add(levy.key)
        return self

    def _select(self, section: Mapping[str, Any], regime: str) -> Any:
        for key in (regime, self.regimes.schedule_for(regime), DEFAULT_SCHEDULE):
            if key in section:
                return section[key]
        return None

    def brackets_for(self, regime: str) -> Sequence[BracketDefinition]:
        return self._select(self.brackets, regime)

    def allowance_for(self, regime: str) -> AllowanceConfig | None:
        return self._select(self.allowances, regime)

    def rebate_for(self, regime: str) -> RebateConfig | None:
        return self._select(self.rebates, regime)


class JurisdictionManifestEntry(ImmutableModel):
    """Entry describing a supported jurisdiction in the manifest."""

    code: str
    name: str
    currency: str
    currency_symbol: str
    tax_year: str
    aliases: Sequence[str] = Field(default_factory=tuple)
    filename: str | None = None
    status: str = "active"

    @field_validator("aliases", mode="before")
    @classmethod
    def _coerce_aliases(cls, value: Any) -> Sequence[str]:
        return _coerce_string_tuple(value, "aliases")

    @field_validator("tax_year", mode="before")
    @classmethod
    def _coerce_tax_year(cls, value: Any) -> str:
        return str(value)

    @field_validator("code", mode="after")
    @classmethod
    def _normalise_code(cls, value: str) -> str:
        return value.strip().upper()

    @computed_field
    @property
    def resolved_filename(self) -> str:
        return self.filename or f"{self.code.lower()}.yaml"


class JurisdictionManifest(ImmutableModel):
    """Manifest describing the available jurisdiction rule files."""

    jurisdictions: Sequence[JurisdictionManifestEntry]

    @model_validator(mode="after")
    def _validate_entries(self) -> JurisdictionManifest:
        seen_codes: set[str] = set()
        seen_names: set[str] = set()
        for entry in self.jurisdictions:
            if entry.code in seen_codes:
                raise ConfigurationError(
                    f"Duplicate jurisdiction {entry.code} declared in the configuration manifest"
                )
            seen_codes.add(entry.code)
            for name in (entry.name, *entry.aliases):
                key = _normalise_key(name)
                if key in seen_names:
                    raise ConfigurationError(
                        f"Jurisdiction name '{name}' is declared more than once"
                    )
                seen_names.add(key)
        return self

    def get_entry(self, code: str) -> JurisdictionManifestEntry:
        wanted = code.strip().upper()
        for entry in self.jurisdictions:
            if entry.code == wanted:
                return entry
        raise KeyError(code)

    def code_for_name(self, name: str) -> str | None:
        wanted = _normalise_key(name)
        for entry in self.jurisdictions:
            if wanted in {_normalise_key(alias) for alias in (entry.name, *entry.aliases)}:
                return entry.code
        return None

    @computed_field
    @property
    def supported_codes(self) -> tuple[str, ...]:
        return tuple(entry.code for entry in self.jurisdictions)


__all__ = [
    "AllowanceConfig",
    "BracketDefinition",
    "ConfigurationError",
    "DEFAULT_SCHEDULE",
    "DeductionFieldConfig",
    "ImmutableModel",
    "JurisdictionConfiguration",
    "JurisdictionManifest",
    "JurisdictionManifestEntry",
    "LevyBase",
    "LevyConfig",
    "PercentageLevyConfig",
    "PlanLevyConfig",
    "ProgressiveLevyConfig",
    "RebateConfig",
    "RegimeConfig",
    "RegionalLevyConfig",
    "RepaymentPlan",
    "SurchargeTier",
    "SurtaxLevyConfig",
    "TieredLevyConfig",
    "ValidationError",
    "validate_bracket_sequence",
]
