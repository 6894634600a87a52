"""Canada federal income tax, CPP, EI and an optional provincial estimate."""

from __future__ import annotations

from ..base import TaxStrategy
from ..context import CanadaContext


class CanadaTaxStrategy(TaxStrategy):
    country_code = "CA"
    context_model = CanadaContext
