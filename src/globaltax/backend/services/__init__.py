"""Service-layer helpers for the GlobalTax HTTP backend."""

from .request_parser import parse_calculation_payload
from .response_builder import build_calculation_response, build_collection_response

__all__ = [
    "build_calculation_response",
    "build_collection_response",
    "parse_calculation_payload",
]
