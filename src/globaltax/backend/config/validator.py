"""Utilities for validating jurisdiction rule files and surfacing issues."""

from __future__ import annotations

import argparse
from collections import Counter
from typing import Iterable, Mapping, Sequence

from .jurisdiction_config import (
    BracketDefinition,
    ConfigurationError,
    DEFAULT_SCHEDULE,
    DeductionFieldConfig,
    JurisdictionConfiguration,
    available_jurisdictions,
    load_jurisdiction_configuration,
)
from .schema import (
    PercentageLevyConfig,
    PlanLevyConfig,
    RegionalLevyConfig,
    SurtaxLevyConfig,
    TieredLevyConfig,
)


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_rate(scope: str, label: str, value: float) -> list[str]:
    if value < 0 or value > 1:
        return [_format_scope(scope, f"{label} must be between 0 and 1 (found {value})")]
    return []


def _validate_schedule(scope: str, brackets: Sequence[BracketDefinition]) -> list[str]:
    errors: list[str] = []
    rates = [bracket.rate for bracket in brackets]
    if rates != sorted(rates):
        errors.append(_format_scope(scope, "bracket rates should not decrease"))
    return errors


def _validate_regime_references(
    scope: str,
    regimes: Iterable[str],
    accepted: Sequence[str],
) -> list[str]:
    errors: list[str] = []
    for regime in regimes:
        if regime not in accepted:
            errors.append(_format_scope(scope, f"references unknown regime '{regime}'"))
    return errors


def _validate_keyed_section(
    scope: str, section: Mapping[str, object], accepted: Sequence[str]
) -> list[str]:
    keys = [key for key in section if key != DEFAULT_SCHEDULE]
    return _validate_regime_references(scope, keys, accepted)


def _validate_deductions(
    fields: Sequence[DeductionFieldConfig], accepted: Sequence[str]
) -> list[str]:
    errors: list[str] = []

    duplicates = [
        key for key, count in Counter(field.key for field in fields).items() if count > 1
    ]
    if duplicates:
        errors.append(
            _format_scope("deductions", f"duplicate deduction keys detected: {sorted(duplicates)}")
        )

    for field in fields:
        scope = f"deductions.{field.key}"
        if not field.label.strip():
            errors.append(_format_scope(scope, "label must not be empty"))
        errors.extend(
            _validate_regime_references(scope, field.applicable_regimes, accepted)
        )
        if field.applicable_regimes and set(field.applicable_regimes) == set(accepted):
            errors.append(
                _format_scope(
                    scope,
                    "applicable_regimes lists every regime; omit it instead",
                )
            )

    return errors


def _validate_regional_levy(
    scope: str, levy: RegionalLevyConfig, config: JurisdictionConfiguration
) -> list[str]:
    errors: list[str] = []
    errors.extend(_validate_rate(scope, "default_rate", levy.default_rate))
    for region, rate in levy.rates.items():
        errors.extend(_validate_rate(scope, f"rate for '{region}'", rate))

    known_regions = set(levy.rates) | set(levy.schedules)
    for alias, target in levy.aliases.items():
        if target.casefold() not in known_regions:
            errors.append(
                _format_scope(scope, f"alias '{alias}' points to unknown region '{target}'")
            )

    overlapping = set(levy.rates) & set(levy.schedules)
    if overlapping:
        errors.append(
            _format_scope(
                scope,
                f"regions declare both a flat rate and a schedule: {sorted(overlapping)}",
            )
        )

    if levy.selector == "regime":
        accepted = config.regimes.accepted
        missing = [regime for regime in accepted if regime.casefold() not in known_regions]
        if missing:
            errors.append(
                _format_scope(
                    scope,
                    f"no rate or schedule declared for regimes {missing}",
                )
            )
    return errors


def _validate_levies(config: JurisdictionConfiguration) -> list[str]:
    errors: list[str] = []
    accepted = config.regimes.accepted

    for levy in config.levies:
        scope = f"levies.{levy.key}"
        errors.extend(_validate_regime_references(scope, levy.applicable_regimes, accepted))

        if isinstance(levy, PercentageLevyConfig):
            errors.extend(_validate_rate(scope, "rate", levy.rate))
            if levy.wage_cap is not None and levy.base == "tax":
                errors.append(
                    _format_scope(scope, "wage_cap is meaningless for tax-derived levies")
                )
        elif isinstance(levy, SurtaxLevyConfig):
            errors.extend(_validate_rate(scope, "rate", levy.rate))
            errors.extend(_validate_rate(scope, "additional_rate", levy.additional_rate))
            errors.extend(
                _validate_regime_references(scope, levy.regime_thresholds, accepted)
            )
        elif isinstance(levy, TieredLevyConfig):
            for tier in levy.tiers:
                errors.extend(_validate_rate(scope, f"tier {tier.threshold} rate", tier.rate))
            rates = [tier.rate for tier in levy.tiers]
            if rates != sorted(rates):
                errors.append(_format_scope(scope, "tier rates should not decrease"))
        elif isinstance(levy, RegionalLevyConfig):
            errors.extend(_validate_regional_levy(scope, levy, config))
        elif isinstance(levy, PlanLevyConfig):
            for name, plan in levy.plans.items():
                errors.extend(_validate_rate(scope, f"plan '{name}' rate", plan.rate))
                if plan.threshold < 0:
                    errors.append(
                        _format_scope(scope, f"plan '{name}' threshold must be non-negative")
                    )

    return errors


def validate_jurisdiction_configuration(config: JurisdictionConfiguration) -> list[str]:
    """Return a list of validation issues detected for ``config``."""

    errors: list[str] = []
    accepted = config.regimes.accepted

    for name, brackets in config.brackets.items():
        errors.extend(_validate_schedule(f"brackets.{name}", brackets))

    errors.extend(_validate_keyed_section("brackets", config.brackets, accepted))
    errors.extend(_validate_keyed_section("allowances", config.allowances, accepted))
    errors.extend(_validate_keyed_section("rebates", config.rebates, accepted))
    errors.extend(_validate_deductions(config.deductions, accepted))
    errors.extend(_validate_levies(config))

    return errors


def validate_all_jurisdictions(codes: Sequence[str] | None = None) -> dict[str, list[str]]:
    """Validate all configured jurisdictions and return issues keyed by code."""

    targets = codes or available_jurisdictions()
    results: dict[str, list[str]] = {}

    for code in targets:
        config = load_jurisdiction_configuration(code.upper())
        results[config.code] = validate_jurisdiction_configuration(config)

    return results


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Validate configured jurisdiction rule files and report issues "
            "helpful to contributors."
        )
    )
    parser.add_argument(
        "codes",
        nargs="*",
        help="Specific jurisdiction codes to validate (defaults to all configured)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)
    codes = [code.upper() for code in args.codes] or list(available_jurisdictions())

    if not codes:
        parser.print_help()
        return 1

    exit_code = 0

    for code in codes:
        try:
            config = load_jurisdiction_configuration(code)
        except (FileNotFoundError, ConfigurationError) as error:
            print(f"[{code}] failed to load configuration: {error}")
            exit_code = 1
            continue

        issues = validate_jurisdiction_configuration(config)
        if issues:
            exit_code = 1
            print(f"[{code}] {len(issues)} issue(s) detected:")
            for issue in issues:
                print(f"  - {issue}")
        else:
            print(f"[{code}] OK")

    return exit_code


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
