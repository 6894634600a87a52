"""Configuration loader wrapping the shared schema models."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Sequence

import yaml
from pydantic import ValidationError

from .schema import (
    AllowanceConfig,
    BracketDefinition,
    ConfigurationError,
    DEFAULT_SCHEDULE,
    DeductionFieldConfig,
    JurisdictionConfiguration,
    JurisdictionManifest,
    JurisdictionManifestEntry,
    LevyConfig,
    RebateConfig,
    RegimeConfig,
)

CONFIG_DIRECTORY = Path(__file__).resolve().parent / "data"
MANIFEST_FILE = CONFIG_DIRECTORY / "manifest.yaml"


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration file must define a mapping at the top level")
    return data


@lru_cache(maxsize=1)
def load_manifest() -> JurisdictionManifest:
    """Load and cache the jurisdiction manifest."""

    if not MANIFEST_FILE.exists():
        raise FileNotFoundError("Configuration manifest not found")

    raw_manifest = _load_yaml(MANIFEST_FILE)

    try:
        return JurisdictionManifest.model_validate(raw_manifest)
    except ValidationError as error:
        raise ConfigurationError(f"Manifest validation failed: {error}") from error


def manifest_entries() -> Sequence[JurisdictionManifestEntry]:
    """Expose the configured manifest entries."""

    return load_manifest().jurisdictions


@lru_cache(maxsize=16)
def load_jurisdiction_configuration(code: str) -> JurisdictionConfiguration:
    """Load the rule set for the jurisdiction identified by ``code``."""

    try:
        manifest_entry = load_manifest().get_entry(code)
    except KeyError as exc:
        raise FileNotFoundError(
            f"Configuration for jurisdiction {code} not declared in manifest"
        ) from exc

    config_file = CONFIG_DIRECTORY / manifest_entry.resolved_filename
    if not config_file.exists():
        raise FileNotFoundError(
            f"Configuration file for {manifest_entry.code} missing: {config_file.name}"
        )

    raw_config = _load_yaml(config_file)
    raw_config.setdefault("code", manifest_entry.code)
    raw_config.setdefault("name", manifest_entry.name)
    raw_config.setdefault("currency", manifest_entry.currency)
    raw_config.setdefault("currency_symbol", manifest_entry.currency_symbol)
    raw_config.setdefault("tax_year", manifest_entry.tax_year)

    try:
        configuration = JurisdictionConfiguration.model_validate(raw_config)
    except ValidationError as error:
        raise ConfigurationError(
            f"Configuration validation failed for {manifest_entry.code}: {error}"
        ) from error

    if configuration.code.upper() != manifest_entry.code:
        raise ConfigurationError(
            "Configuration code mismatch: "
            f"expected {manifest_entry.code}, found {configuration.code}"
        )
    if configuration.tax_year != manifest_entry.tax_year:
        raise ConfigurationError(
            f"Tax year mismatch for {manifest_entry.code}: manifest declares "
            f"{manifest_entry.tax_year}, file declares {configuration.tax_year}"
        )

    return configuration


def available_jurisdictions() -> Sequence[str]:
    """Return the jurisdiction codes declared in the manifest."""

    return load_manifest().supported_codes


__all__ = [
    "AllowanceConfig",
    "BracketDefinition",
    "CONFIG_DIRECTORY",
    "ConfigurationError",
    "DEFAULT_SCHEDULE",
    "DeductionFieldConfig",
    "JurisdictionConfiguration",
    "JurisdictionManifest",
    "JurisdictionManifestEntry",
    "LevyConfig",
    "MANIFEST_FILE",
    "RebateConfig",
    "RegimeConfig",
    "available_jurisdictions",
    "load_jurisdiction_configuration",
    "load_manifest",
    "manifest_entries",
]
