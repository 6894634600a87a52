"""Unit coverage for the project version helper."""

from __future__ import annotations

from importlib import metadata
from pathlib import Path

import pytest

from globaltax.backend import version as version_module
from globaltax.backend.version import get_project_version

PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"


def read_pyproject_version() -> str:
    section: str | None = None
    for raw_line in PYPROJECT.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if line.startswith("[") and line.endswith("]"):
            section = line.strip("[]")
        elif section == "project" and line.startswith("version"):
            return line.partition("=")[2].strip().strip("\"")
    raise RuntimeError("Version not found in pyproject.toml")


@pytest.fixture(autouse=True)
def _clear_version_cache():
    get_project_version.cache_clear()
    yield
    get_project_version.cache_clear()


def test_get_project_version_prefers_installed_metadata(monkeypatch) -> None:
    monkeypatch.setattr(metadata, "version", lambda package: "9.9.9")

    assert get_project_version() == "9.9.9"


def test_get_project_version_falls_back_to_pyproject(monkeypatch) -> None:
    def raise_package_not_found(_: str) -> str:
        raise metadata.PackageNotFoundError

    monkeypatch.setattr(metadata, "version", raise_package_not_found)

    assert get_project_version() == read_pyproject_version()


def test_version_from_pyproject_requires_project_table(tmp_path: Path) -> None:
    path = tmp_path / "pyproject.toml"
    path.write_text('[tool.other]\nversion = "1.2.3"\n', encoding="utf-8")

    with pytest.raises(RuntimeError, match="No \\[project\\] version"):
        version_module._version_from_pyproject(path)
