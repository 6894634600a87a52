from __future__ import annotations

from ..base import TaxStrategy


class AustraliaTaxStrategy(TaxStrategy):
    country_code = "AU"
