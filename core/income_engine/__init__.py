"""
Income Valuation Engine v1.0

Income-approach fair value: rentable area and age-adjusted rent from
categorical rate tables, capitalised at the market yield, then compared
to the listed price.
"""

from .models import (
    ValuationInput,
    RentEstimate,
    Judgment,
    JudgmentOutcome,
    ValuationResult,
)
from .rate_tables import (
    RateProvider,
    RateTables,
    DEFAULT_RATE_TABLES,
)
from .valuation import (
    IncomeValuationEngine,
    UNDERVALUED_THRESHOLD,
    OVERPRICED_THRESHOLD,
)

__all__ = [
    # Models
    "ValuationInput",
    "RentEstimate",
    "Judgment",
    "JudgmentOutcome",
    "ValuationResult",
    # Rate tables
    "RateProvider",
    "RateTables",
    "DEFAULT_RATE_TABLES",
    # Engine
    "IncomeValuationEngine",
    "UNDERVALUED_THRESHOLD",
    "OVERPRICED_THRESHOLD",
]

__version__ = "1.0"
