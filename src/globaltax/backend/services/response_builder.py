"""Utilities for serialising API responses."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Tuple

from flask import jsonify

ResponseTuple = Tuple[Any, int]


def build_calculation_response(payload: Mapping[str, Any], status: int = 200) -> ResponseTuple:
    """Return a Flask JSON response for the calculation ``payload``."""

    return jsonify(payload), status


def build_collection_response(key: str, items: Sequence[Any], **extra: Any) -> ResponseTuple:
    """Wrap ``items`` under ``key`` with a count, plus any ``extra`` top-level fields."""

    payload: dict[str, Any] = {key: list(items), "count": len(items)}
    payload.update(extra)
    return jsonify(payload), 200
