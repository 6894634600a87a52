from __future__ import annotations

from ..base import TaxStrategy


class BrazilTaxStrategy(TaxStrategy):
    country_code = "BR"
