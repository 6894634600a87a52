"""Unit tests for calculation request parsing helpers."""

from __future__ import annotations

import pytest
from flask import Flask, request
from werkzeug.exceptions import BadRequest

from globaltax.backend.services.request_parser import parse_calculation_payload


def test_parse_payload_uses_query_hints(app: Flask) -> None:
    """Query parameters should supply the country and regime when absent."""

    with app.test_request_context(
        "/api/v1/calculations?country=IN&regime=old",
        method="POST",
        json={"gross_salary": 900_000},
    ):
        payload = parse_calculation_payload(request)

    assert payload == {"gross_salary": 900_000, "country": "IN", "regime": "old"}


def test_parse_payload_prefers_body_values(app: Flask) -> None:
    """Explicit body fields should not be overridden by the query string."""

    with app.test_request_context(
        "/api/v1/calculations?country=US",
        method="POST",
        json={"country": "CA", "gross_salary": 50_000},
    ):
        payload = parse_calculation_payload(request)

    assert payload["country"] == "CA"
    assert "regime" not in payload


def test_parse_payload_rejects_non_object(app: Flask) -> None:
    """Non-object JSON payloads should trigger BadRequest responses."""

    with app.test_request_context(
        "/api/v1/calculations",
        method="POST",
        json=["not", "an", "object"],
    ):
        with pytest.raises(BadRequest):
            parse_calculation_payload(request)


def test_parse_payload_rejects_invalid_json(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/calculations",
        method="POST",
        data="{not json",
        content_type="application/json",
    ):
        with pytest.raises(BadRequest, match="valid JSON"):
            parse_calculation_payload(request)
