"""Germany income tax zones with solidarity surcharge and church tax."""

from __future__ import annotations

from ..base import TaxStrategy
from ..context import GermanyContext


class GermanyTaxStrategy(TaxStrategy):
    country_code = "DE"
    context_model = GermanyContext
