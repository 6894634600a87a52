"""REST endpoints for tax calculations and what-if comparisons."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, request

from globaltax.backend.app.services.calculation_service import (
    calculate_tax,
    compare_salaries,
)
from globaltax.backend.services import (
    build_calculation_response,
    parse_calculation_payload,
)

blueprint = Blueprint("calculations", __name__, url_prefix="/api/v1")


@blueprint.post("/calculations")
def create_calculation() -> tuple[Any, int]:
    """Create a tax calculation using the submitted JSON payload."""

    payload = parse_calculation_payload(request)
    result = calculate_tax(payload)

    return build_calculation_response(result)


@blueprint.post("/comparisons")
def create_comparison() -> tuple[Any, int]:
    """Compare the submitted salary against ``what_if_salary``."""

    payload = parse_calculation_payload(request)
    result = compare_salaries(payload)

    return build_calculation_response(result)
