from __future__ import annotations

from ..base import TaxStrategy


class SouthAfricaTaxStrategy(TaxStrategy):
    country_code = "ZA"
