from __future__ import annotations

from ..base import TaxStrategy


class FranceTaxStrategy(TaxStrategy):
    country_code = "FR"
