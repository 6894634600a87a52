"""Concrete tax strategies, one per supported jurisdiction."""

from .australia import AustraliaTaxStrategy
from .brazil import BrazilTaxStrategy
from .canada import CanadaTaxStrategy
from .france import FranceTaxStrategy
from .germany import GermanyTaxStrategy
from .india import IndiaTaxStrategy
from .south_africa import SouthAfricaTaxStrategy
from .united_kingdom import UnitedKingdomTaxStrategy
from .united_states import UnitedStatesTaxStrategy

STRATEGY_TYPES = (
    UnitedStatesTaxStrategy,
    UnitedKingdomTaxStrategy,
    CanadaTaxStrategy,
    AustraliaTaxStrategy,
    GermanyTaxStrategy,
    FranceTaxStrategy,
    BrazilTaxStrategy,
    IndiaTaxStrategy,
    SouthAfricaTaxStrategy,
)

__all__ = [
    "AustraliaTaxStrategy",
    "BrazilTaxStrategy",
    "CanadaTaxStrategy",
    "FranceTaxStrategy",
    "GermanyTaxStrategy",
    "IndiaTaxStrategy",
    "STRATEGY_TYPES",
    "SouthAfricaTaxStrategy",
    "UnitedKingdomTaxStrategy",
    "UnitedStatesTaxStrategy",
]
