"""Capping and totalling of user-entered deductions."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from globaltax.backend.config.schema import AllowanceConfig, DeductionFieldConfig

_LOGGER = logging.getLogger(__name__)


def field_applies(field: DeductionFieldConfig, regime: str | None) -> bool:
    """Return ``True`` when ``field`` may be claimed under ``regime``."""

    if not field.applicable_regimes or regime is None:
        return True
    return regime in field.applicable_regimes


def cap_deductions(
    deductions: Mapping[str, float],
    fields: Sequence[DeductionFieldConfig],
    regime: str | None,
) -> dict[str, float]:
    """Return the claimable amount per declared field.

    Values are floored at zero and limited to the field's cap. Fields that do
    not apply to ``regime`` and keys the jurisdiction does not declare are
    dropped. Capping an already capped mapping returns it unchanged.
    """

    declared = {field.key for field in fields}
    unknown = sorted(key for key in deductions if key not in declared)
    if unknown:
        _LOGGER.debug("Ignoring undeclared deduction keys: %s", unknown)

    applied: dict[str, float] = {}
    for field in fields:
        if field.key not in deductions or not field_applies(field, regime):
            continue
        value = max(0.0, float(deductions[field.key]))
        if field.max_value is not None:
            value = min(value, field.max_value)
        applied[field.key] = value
    return applied


def resolve(
    deductions: Mapping[str, float],
    fields: Sequence[DeductionFieldConfig],
    regime: str | None,
    allowance: AllowanceConfig | None = None,
) -> float:
    """Return the total deduction: capped user amounts plus the fixed allowance."""

    total = sum(cap_deductions(deductions, fields, regime).values())
    if allowance is not None:
        total += allowance.amount
    return total


__all__ = ["cap_deductions", "field_applies", "resolve"]
