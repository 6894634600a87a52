"""Integration coverage for jurisdiction metadata endpoints."""

from http import HTTPStatus

from flask.testing import FlaskClient

from globaltax.backend.version import get_project_version


def test_list_jurisdictions_endpoint(client: FlaskClient) -> None:
    response = client.get("/api/v1/jurisdictions")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["count"] == 9
    assert payload["version"] == get_project_version()

    codes = [entry["code"] for entry in payload["jurisdictions"]]
    assert codes == ["US", "UK", "CA", "AU", "DE", "FR", "BR", "IN", "ZA"]

    india = payload["jurisdictions"][codes.index("IN")]
    assert india == {
        "code": "IN",
        "name": "India",
        "currency": "INR",
        "currency_symbol": "₹",
        "tax_year": "2025-26",
        "regimes": ["new", "old"],
        "default_regime": "new",
        "regime_label": "Tax regime",
    }


def test_jurisdiction_detail_lists_regime_specific_deductions(client: FlaskClient) -> None:
    old = client.get("/api/v1/jurisdictions/IN?regime=old").get_json()
    new = client.get("/api/v1/jurisdictions/india").get_json()

    assert old["regime"] == "old"
    assert [field["key"] for field in old["deductions"]] == ["ded_80c", "ded_80d", "ded_other"]
    assert old["max_deductions"]["ded_80c"] == 150_000
    assert old["rebate"]["threshold"] == 500_000

    assert new["regime"] == "new"
    assert new["deductions"] == []
    assert new["allowance"] == {
        "key": "standard_deduction",
        "label": "Standard Deduction",
        "amount": 75_000,
    }
    assert {levy["key"] for levy in new["additional_taxes"]} == {"surcharge", "cess"}


def test_jurisdiction_detail_renders_bracket_table(client: FlaskClient) -> None:
    response = client.get("/api/v1/jurisdictions/uk?regime=Wales")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["regime"] == "wales"
    assert payload["regime_label"] == "Nation"
    assert payload["brackets"][1] == {
        "min": 12_570,
        "max": 50_270,
        "rate": 0.2,
        "rate_label": "20%",
        "label": "Basic rate",
    }
    assert payload["brackets"][-1]["max"] is None


def test_jurisdiction_detail_falls_back_to_default_regime(client: FlaskClient) -> None:
    payload = client.get("/api/v1/jurisdictions/US?regime=widowed").get_json()

    assert payload["regime"] == "single"
    assert payload["allowance"]["amount"] == 14_600


def test_unknown_jurisdiction_returns_not_found(client: FlaskClient) -> None:
    response = client.get("/api/v1/jurisdictions/atlantis")

    assert response.status_code == HTTPStatus.NOT_FOUND
    payload = response.get_json()
    assert payload["error"] == "unsupported_jurisdiction"
    assert payload["country"] == "atlantis"
