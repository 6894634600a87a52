"""Helpers for extracting calculation requests from incoming HTTP requests."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from flask import Request
from werkzeug.exceptions import BadRequest


def _apply_query_hints(req: Request, payload: dict[str, Any]) -> None:
    """Fill ``country`` and ``regime`` from the query string when absent in the body."""

    for field in ("country", "regime"):
        if payload.get(field) in (None, ""):
            hint = req.args.get(field)
            if hint:
                payload[field] = hint


def parse_calculation_payload(req: Request) -> dict[str, Any]:
    """Extract and validate a JSON payload from ``req``."""

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request body must be valid JSON")
    if not isinstance(data, Mapping):
        raise BadRequest("Request JSON must be an object")

    payload = dict(data)
    _apply_query_hints(req, payload)

    return payload
