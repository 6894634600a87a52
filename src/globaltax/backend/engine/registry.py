"""Lookup table mapping jurisdiction codes and names to strategies."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from functools import lru_cache

from globaltax.backend.config.jurisdiction_config import load_manifest

from .base import TaxStrategy
from .strategies import STRATEGY_TYPES

_LOGGER = logging.getLogger(__name__)


class UnsupportedJurisdictionError(LookupError):
    """Raised when a caller requires a jurisdiction that is not registered."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f"Unsupported jurisdiction '{identifier}'")
        self.identifier = identifier


class RegistryFrozenError(RuntimeError):
    """Raised when registering a strategy after the registry was frozen."""


def _normalise_name(value: str) -> str:
    return " ".join(value.strip().casefold().split())


class StrategyRegistry:
    """Case-insensitive registry of tax strategies.

    Registries are populated once and then frozen; lookups on a frozen
    registry never mutate it, so a single instance can be shared freely.
    """

    def __init__(self) -> None:
        self._strategies: dict[str, TaxStrategy] = {}
        self._names: dict[str, str] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(self, strategy: TaxStrategy, *, aliases: Iterable[str] = ()) -> None:
        if self._frozen:
            raise RegistryFrozenError(
                f"Cannot register {strategy.country_code}: registry is frozen"
            )
        code = strategy.country_code.upper()
        if code in self._strategies:
            raise ValueError(f"Jurisdiction {code} is already registered")

        self._strategies[code] = strategy
        for name in (strategy.country_name, *aliases):
            self._names[_normalise_name(name)] = code

    def freeze(self) -> None:
        self._frozen = True

    def get(self, code: str) -> TaxStrategy | None:
        return self._strategies.get(code.strip().upper())

    def get_by_name(self, name: str) -> TaxStrategy | None:
        code = self._names.get(_normalise_name(name))
        return self._strategies.get(code) if code is not None else None

    def resolve(self, identifier: str) -> TaxStrategy | None:
        """Return the strategy for a code or a country name."""

        return self.get(identifier) or self.get_by_name(identifier)

    def require(self, identifier: str) -> TaxStrategy:
        strategy = self.resolve(identifier)
        if strategy is None:
            raise UnsupportedJurisdictionError(identifier)
        return strategy

    def supported_countries(self) -> tuple[str, ...]:
        return tuple(self._strategies)

    def all(self) -> tuple[TaxStrategy, ...]:
        return tuple(self._strategies.values())

    def __contains__(self, identifier: object) -> bool:
        return isinstance(identifier, str) and self.resolve(identifier) is not None

    def __len__(self) -> int:
        return len(self._strategies)


def build_registry(
    strategy_types: Sequence[type[TaxStrategy]] = STRATEGY_TYPES,
) -> StrategyRegistry:
    """Instantiate every strategy in manifest order and freeze the registry."""

    manifest = load_manifest()
    by_code = {strategy_type.country_code: strategy_type for strategy_type in strategy_types}

    registry = StrategyRegistry()
    for entry in manifest.jurisdictions:
        strategy_type = by_code.get(entry.code)
        if strategy_type is None:
            _LOGGER.warning("No strategy implemented for jurisdiction %s", entry.code)
            continue
        registry.register(strategy_type(), aliases=entry.aliases)

    registry.freeze()
    _LOGGER.debug("Strategy registry built: %s", ", ".join(registry.supported_countries()))
    return registry


@lru_cache(maxsize=1)
def get_registry() -> StrategyRegistry:
    """Return the shared, lazily built default registry."""

    return build_registry()


__all__ = [
    "RegistryFrozenError",
    "StrategyRegistry",
    "UnsupportedJurisdictionError",
    "build_registry",
    "get_registry",
]
