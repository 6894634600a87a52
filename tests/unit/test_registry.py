"""Unit tests for the strategy registry."""

from __future__ import annotations

import pytest

from globaltax.backend.engine import (
    RegistryFrozenError,
    StrategyRegistry,
    UnsupportedJurisdictionError,
    build_registry,
    get_registry,
)
from globaltax.backend.engine.strategies import (
    IndiaTaxStrategy,
    UnitedStatesTaxStrategy,
)


def test_default_registry_lists_manifest_jurisdictions(registry: StrategyRegistry) -> None:
    assert registry.supported_countries() == (
        "US",
        "UK",
        "CA",
        "AU",
        "DE",
        "FR",
        "BR",
        "IN",
        "ZA",
    )
    assert len(registry.all()) == 9
    assert registry.frozen


def test_get_registry_is_cached() -> None:
    assert get_registry() is get_registry()


def test_lookup_by_code_is_case_insensitive(registry: StrategyRegistry) -> None:
    strategy = registry.get("us")

    assert strategy is not None
    assert strategy.country_code == "US"
    assert strategy.currency_symbol == "$"


def test_missing_code_returns_none(registry: StrategyRegistry) -> None:
    assert registry.get("XX") is None
    assert "XX" not in registry


@pytest.mark.parametrize(
    ("name", "code"),
    [
        ("India", "IN"),
        ("United States", "US"),
        ("Canada", "CA"),
        ("United Kingdom", "UK"),
        ("UK", "UK"),
        ("Australia", "AU"),
        ("Germany", "DE"),
        ("France", "FR"),
        ("Brazil", "BR"),
        ("south  africa", "ZA"),
    ],
)
def test_names_resolve_to_codes(registry: StrategyRegistry, name: str, code: str) -> None:
    strategy = registry.resolve(name)

    assert strategy is not None
    assert strategy.country_code == code


def test_get_by_name_does_not_match_codes(registry: StrategyRegistry) -> None:
    assert registry.get_by_name("Narnia") is None
    assert registry.get_by_name("india") is registry.get("IN")


def test_require_raises_for_unknown_jurisdiction(registry: StrategyRegistry) -> None:
    with pytest.raises(UnsupportedJurisdictionError) as excinfo:
        registry.require("Atlantis")

    assert excinfo.value.identifier == "Atlantis"
    assert isinstance(excinfo.value, LookupError)


def test_frozen_registry_rejects_registration(registry: StrategyRegistry) -> None:
    with pytest.raises(RegistryFrozenError):
        registry.register(UnitedStatesTaxStrategy())


def test_duplicate_registration_is_rejected() -> None:
    local = StrategyRegistry()
    local.register(IndiaTaxStrategy())

    with pytest.raises(ValueError):
        local.register(IndiaTaxStrategy())


def test_build_registry_with_subset() -> None:
    local = build_registry((IndiaTaxStrategy,))

    assert local.supported_countries() == ("IN",)
    assert local.get_by_name("Bharat") is local.get("IN")
    assert local.frozen
