"""Schema-level rejection of malformed rule files."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import ValidationError

from globaltax.backend.config.schema import (
    JurisdictionConfiguration,
    JurisdictionManifest,
    PercentageLevyConfig,
    RegimeConfig,
    RegionalLevyConfig,
)


def _config(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "code": "XX",
        "name": "Testland",
        "currency": "TST",
        "currency_symbol": "T",
        "tax_year": 2024,
        "brackets": [
            {"min": 0, "max": 10_000, "rate": 0.0},
            {"min": 10_000, "rate": 0.2},
        ],
    }
    data.update(overrides)
    return data


def test_minimal_configuration_uses_default_schedule() -> None:
    config = JurisdictionConfiguration.model_validate(_config())

    assert config.tax_year == "2024"
    assert config.regimes.default == "default"
    assert len(config.brackets_for("default")) == 2
    assert config.allowance_for("default") is None


@pytest.mark.parametrize(
    "brackets",
    [
        [],
        [{"min": 100, "rate": 0.1}],
        [{"min": 0, "max": 10_000, "rate": 0.1}, {"min": 12_000, "rate": 0.2}],
        [{"min": 0, "max": 10_000, "rate": 0.1}, {"min": 10_000, "max": 20_000, "rate": 0.2}],
        [{"min": 0, "rate": 0.1}, {"min": 0, "rate": 0.2}],
        [{"min": 0, "rate": 1.5}],
    ],
    ids=["empty", "not-from-zero", "gap", "closed-top", "two-open", "rate-above-one"],
)
def test_malformed_schedules_are_rejected(brackets: list[dict[str, Any]]) -> None:
    with pytest.raises(ValidationError):
        JurisdictionConfiguration.model_validate(_config(brackets=brackets))


def test_unknown_fields_are_rejected() -> None:
    with pytest.raises(ValidationError):
        JurisdictionConfiguration.model_validate(_config(surprise=True))


def test_default_regime_must_be_accepted() -> None:
    with pytest.raises(ValidationError):
        JurisdictionConfiguration.model_validate(
            _config(regimes={"default": "new", "accepted": ["old"]})
        )


def test_every_regime_needs_a_schedule() -> None:
    with pytest.raises(ValidationError):
        JurisdictionConfiguration.model_validate(
            _config(
                regimes={"default": "a", "accepted": ["a", "b"]},
                brackets={"a": [{"min": 0, "rate": 0.1}]},
            )
        )


def test_regime_aliases_must_target_accepted_regimes() -> None:
    with pytest.raises(ValidationError, match="unknown regime"):
        RegimeConfig.model_validate(
            {"default": "a", "accepted": ["a", "b"], "aliases": {"x": "c"}}
        )


def test_regime_names_are_normalised_before_alias_lookup() -> None:
    regimes = RegimeConfig.model_validate(
        {
            "default": "federal",
            "accepted": ["federal", "bc", "nova-scotia"],
            "aliases": {"British Columbia": "bc"},
        }
    )

    assert regimes.canonical("british_columbia") == "bc"
    assert regimes.canonical("  Nova   Scotia ") == "nova-scotia"
    assert regimes.canonical("   ") is None
    assert regimes.canonical(None) is None
    assert regimes.requires_selection
    assert not RegimeConfig().requires_selection


def test_duplicate_levy_keys_are_rejected() -> None:
    levy = {"kind": "percentage", "key": "levy", "label": "Levy", "rate": 0.01}
    with pytest.raises(ValidationError):
        JurisdictionConfiguration.model_validate(_config(levies=[levy, levy]))


def test_levies_are_discriminated_by_kind() -> None:
    config = JurisdictionConfiguration.model_validate(
        _config(
            levies=[
                {"kind": "percentage", "key": "flat", "label": "Flat", "rate": 0.01},
                {
                    "kind": "regional",
                    "key": "regional",
                    "label": "Regional",
                    "selector": "state",
                    "rates": {"North": 0.02},
                },
            ]
        )
    )

    assert isinstance(config.levies[0], PercentageLevyConfig)
    assert isinstance(config.levies[1], RegionalLevyConfig)
    assert config.levies[1].rates == {"north": 0.02}


def test_unknown_levy_kind_is_rejected() -> None:
    with pytest.raises(ValidationError):
        JurisdictionConfiguration.model_validate(
            _config(levies=[{"kind": "lottery", "key": "x", "label": "X", "rate": 0.1}])
        )


def test_threshold_free_rebate_cannot_use_marginal_relief() -> None:
    with pytest.raises(ValidationError):
        JurisdictionConfiguration.model_validate(
            _config(rebates={"label": "Rebate", "amount": 10, "marginal_relief": True})
        )


def test_manifest_rejects_duplicate_codes() -> None:
    entry = {"code": "xx", "name": "Testland", "currency": "TST", "currency_symbol": "T", "tax_year": 2024}
    with pytest.raises(ValidationError):
        JurisdictionManifest.model_validate(
            {"jurisdictions": [entry, {**entry, "name": "Otherland"}]}
        )


def test_manifest_normalises_codes_and_filenames() -> None:
    manifest = JurisdictionManifest.model_validate(
        {
            "jurisdictions": [
                {
                    "code": "xx",
                    "name": "Testland",
                    "aliases": "Testia",
                    "currency": "TST",
                    "currency_symbol": "T",
                    "tax_year": 2024,
                }
            ]
        }
    )

    entry = manifest.get_entry("XX")
    assert entry.code == "XX"
    assert entry.resolved_filename == "xx.yaml"
    assert entry.tax_year == "2024"
    assert manifest.code_for_name("testia") == "XX"
    assert manifest.supported_codes == ("XX",)
