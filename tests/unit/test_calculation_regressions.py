"""Regression coverage ensuring calculator outputs stay stable."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from globaltax.backend.app.services.calculation_service import calculate_tax

_DATA_PATH = Path(__file__).resolve().parents[1] / "data" / "regression_scenarios.json"


@pytest.mark.parametrize(
    "scenario",
    json.loads(_DATA_PATH.read_text("utf-8")),
    ids=lambda item: item["name"],
)
def test_calculate_tax_matches_regression_scenario(scenario: dict[str, object]) -> None:
    """The calculation service returns the expected results for known payloads."""

    payload = scenario["payload"]
    expectations = scenario["expectations"]

    response = calculate_tax(payload)
    result = response["result"]

    for key, value in expectations["result"].items():
        assert result[key] == pytest.approx(value, abs=0.01), key

    for key, value in expectations["additional_taxes"].items():
        assert result["additional_taxes"][key] == pytest.approx(value, abs=0.01), key

    total = result["breakdown"]["income_tax"] + sum(result["additional_taxes"].values())
    assert total == pytest.approx(result["total_tax"], abs=0.02)
    assert response["meta"]["country"] == payload["country"]
