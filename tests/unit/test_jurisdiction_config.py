"""Unit coverage for manifest discovery and rule file loading."""

from __future__ import annotations

from pathlib import Path
from shutil import copy2

import pytest
import yaml

from globaltax.backend.config import jurisdiction_config
from globaltax.backend.config.schema import ConfigurationError


@pytest.fixture()
def isolated_config_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Return a temporary configuration directory patched into the loader."""

    original_directory = jurisdiction_config.CONFIG_DIRECTORY
    for filename in ("manifest.yaml", "za.yaml", "fr.yaml"):
        copy2(original_directory / filename, tmp_path / filename)

    manifest_path = tmp_path / "manifest.yaml"
    manifest = yaml.safe_load(manifest_path.read_text(encoding="utf-8"))
    manifest["jurisdictions"] = [
        entry for entry in manifest["jurisdictions"] if entry["code"] in {"ZA", "FR"}
    ]
    manifest_path.write_text(yaml.safe_dump(manifest, allow_unicode=True), encoding="utf-8")

    monkeypatch.setattr(jurisdiction_config, "CONFIG_DIRECTORY", tmp_path)
    monkeypatch.setattr(jurisdiction_config, "MANIFEST_FILE", manifest_path)
    jurisdiction_config.load_jurisdiction_configuration.cache_clear()
    jurisdiction_config.load_manifest.cache_clear()

    yield tmp_path

    jurisdiction_config.load_jurisdiction_configuration.cache_clear()
    jurisdiction_config.load_manifest.cache_clear()


def test_bundled_manifest_declares_nine_jurisdictions() -> None:
    codes = jurisdiction_config.available_jurisdictions()

    assert codes == ("US", "UK", "CA", "AU", "DE", "FR", "BR", "IN", "ZA")


def test_manifest_metadata_flows_into_configuration() -> None:
    config = jurisdiction_config.load_jurisdiction_configuration("IN")

    assert config.name == "India"
    assert config.currency == "INR"
    assert config.currency_symbol == "₹"
    assert config.tax_year == "2025-26"
    assert config.regimes.default == "new"
    assert len(config.brackets_for("new")) == 7


def test_regime_schedule_aliases_resolve() -> None:
    config = jurisdiction_config.load_jurisdiction_configuration("UK")

    assert config.brackets_for("northern-ireland") == config.brackets_for("england")
    assert config.brackets_for("scotland") != config.brackets_for("england")


def test_loading_is_cached() -> None:
    first = jurisdiction_config.load_jurisdiction_configuration("ZA")

    assert jurisdiction_config.load_jurisdiction_configuration("ZA") is first


def test_isolated_manifest_limits_available_codes(isolated_config_directory: Path) -> None:
    assert jurisdiction_config.available_jurisdictions() == ("FR", "ZA")

    with pytest.raises(FileNotFoundError):
        jurisdiction_config.load_jurisdiction_configuration("US")


def test_missing_rule_file_is_reported(isolated_config_directory: Path) -> None:
    (isolated_config_directory / "za.yaml").unlink()

    with pytest.raises(FileNotFoundError, match="za.yaml"):
        jurisdiction_config.load_jurisdiction_configuration("ZA")


def test_tax_year_mismatch_is_rejected(isolated_config_directory: Path) -> None:
    path = isolated_config_directory / "za.yaml"
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    data["tax_year"] = "1999-00"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")

    with pytest.raises(ConfigurationError, match="Tax year mismatch"):
        jurisdiction_config.load_jurisdiction_configuration("ZA")


def test_invalid_rule_file_raises_configuration_error(isolated_config_directory: Path) -> None:
    path = isolated_config_directory / "fr.yaml"
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    data["brackets"][1]["min"] = 12_000
    path.write_text(yaml.safe_dump(data), encoding="utf-8")

    with pytest.raises(ConfigurationError, match="FR"):
        jurisdiction_config.load_jurisdiction_configuration("FR")


def test_non_mapping_file_is_rejected(isolated_config_directory: Path) -> None:
    (isolated_config_directory / "fr.yaml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        jurisdiction_config.load_jurisdiction_configuration("FR")
