"""Expose jurisdiction metadata consumed by the front-end forms.

The UI renders regime selectors, deduction inputs and bracket tables from
these endpoints instead of duplicating rule tables client-side.
"""

from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify, request

from globaltax.backend.engine import TaxStrategy, get_registry
from globaltax.backend.services import build_collection_response
from globaltax.backend.version import get_project_version

blueprint = Blueprint("jurisdictions", __name__, url_prefix="/api/v1/jurisdictions")


def _summarise(strategy: TaxStrategy) -> dict[str, Any]:
    return {
        "code": strategy.country_code,
        "name": strategy.country_name,
        "currency": strategy.currency,
        "currency_symbol": strategy.currency_symbol,
        "tax_year": strategy.tax_year,
        "regimes": list(strategy.regimes),
        "default_regime": strategy.default_regime,
        "regime_label": strategy.regime_label,
    }


def get_service_metadata() -> dict[str, Any]:
    """Runtime metadata shared by the health check and listing endpoints."""

    return {
        "version": get_project_version(),
        "supported_countries": list(get_registry().supported_countries()),
    }


@blueprint.get("")
def list_jurisdictions():
    """Return every supported jurisdiction in manifest order."""

    items = [_summarise(strategy) for strategy in get_registry().all()]
    return build_collection_response("jurisdictions", items, version=get_project_version())


@blueprint.get("/<string:code>")
def get_jurisdiction(code: str):
    """Return brackets, deduction fields and levies for ``code``.

    ``?regime=`` selects the schedule; unknown regimes fall back to the
    jurisdiction default and the resolved regime is echoed back.
    """

    strategy = get_registry().require(code)
    return jsonify(strategy.describe(request.args.get("regime")))
