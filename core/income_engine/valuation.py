"""
Income Valuation Engine

Implements the income approach:
- Rentable area from gross building area
- Age-adjusted monthly and annual rent
- Fair price by capitalising annual rent at the market yield
- Implied yield at the listed price
- Undervalued / fairly priced / overpriced judgment
"""

import math
from typing import TYPE_CHECKING, Final

from .models import (
    Judgment,
    JudgmentOutcome,
    RentEstimate,
    ValuationInput,
    ValuationResult,
)
from .rate_tables import DEFAULT_RATE_TABLES, RateProvider

if TYPE_CHECKING:
    from core.models import Asset


# =============================================================================
# Policy Constants
# =============================================================================

# Listed below 90% of fair price is undervalued, above 110% overpriced.
UNDERVALUED_THRESHOLD: Final[float] = 0.9
OVERPRICED_THRESHOLD: Final[float] = 1.1

MONTHS_PER_YEAR: Final[int] = 12


def round_half_up(value: float) -> int:
    """Round to the nearest whole unit, halves rounded up."""
    return math.floor(value + 0.5)


class IncomeValuationEngine:
    """
    Income-approach valuation pipeline.

    Parametrised only by a RateProvider's four lookups, so synthetic
    rate tables can be injected for testing. Holds no mutable state.

    Pipeline order:
    1. RENT - rentable area and age-adjusted rent
    2. CAPITALISE - fair price from annual rent and market yield
    3. YIELD - implied yield at the listed price
    4. JUDGE - compare listed price to fair price
    """

    def __init__(self, rates: RateProvider = DEFAULT_RATE_TABLES):
        """
        Initialize valuation engine.

        Args:
            rates: Rate lookups (default: built-in market tables)
        """
        self._rates = rates

    @property
    def rates(self) -> RateProvider:
        return self._rates

    def estimate_fair_value(self, valuation_input: ValuationInput) -> ValuationResult:
        """
        Value one asset.

        Args:
            valuation_input: Validated asset attributes

        Returns:
            ValuationResult with rent estimate, fair price, implied yield
            and judgment
        """
        rent_estimate = self.estimate_rent(valuation_input)

        cap_yield = self._rates.capitalization_yield_percent(
            valuation_input.location_key, valuation_input.category_key
        )
        estimated_fair_price = self._calculate_fair_price(
            rent_estimate.adjusted_annual_rent, cap_yield
        )

        implied_yield = self._calculate_implied_yield(
            rent_estimate.adjusted_annual_rent, valuation_input.listed_price
        )

        judgment = self.judge(valuation_input.listed_price, estimated_fair_price)

        return ValuationResult(
            rent_estimate=rent_estimate,
            estimated_fair_price=estimated_fair_price,
            implied_yield_percent=implied_yield,
            judgment=judgment,
        )

    def appraise_asset(self, asset: "Asset") -> ValuationResult:
        """
        Project an asset record to a ValuationInput and value it.

        Raises:
            ValidationError: If the asset carries malformed numbers
        """
        return self.estimate_fair_value(asset.to_valuation_input())

    def estimate_rent(self, valuation_input: ValuationInput) -> RentEstimate:
        """
        Calculate rentable area and age-adjusted rent.

        rentable = area × ratio
        monthly = rentable × rent/sqm × (1 − decay)
        annual = monthly × 12
        """
        ratio = self._rates.rentable_ratio(valuation_input.category_key)
        rent_per_sqm = self._rates.rent_per_area(
            valuation_input.location_key, valuation_input.category_key
        )
        decay = self._rates.rent_decay_rate(valuation_input.building_age_years)

        rentable_area = valuation_input.building_area_sqm * ratio
        monthly = rentable_area * rent_per_sqm * (1 - decay)

        return RentEstimate(
            rentable_area_sqm=rentable_area,
            adjusted_monthly_rent=monthly,
            adjusted_annual_rent=monthly * MONTHS_PER_YEAR,
        )

    def judge(self, listed_price: float, estimated_fair_price: float) -> Judgment:
        """
        Compare listed price to fair price.

        Comparisons are strict, so a price exactly on 90% or 110% of the
        fair price is fairly priced.

        Args:
            listed_price: Asking price (0 if unknown)
            estimated_fair_price: Capitalised fair price

        Returns:
            Judgment (Indeterminate with zero gap if either price is 0)
        """
        if not listed_price or not estimated_fair_price:
            return Judgment(outcome=JudgmentOutcome.INDETERMINATE)

        price_diff = estimated_fair_price - listed_price
        if float(price_diff).is_integer():
            price_diff = int(price_diff)
        price_diff_rate = round(price_diff / estimated_fair_price * 100, 2)

        if listed_price < estimated_fair_price * UNDERVALUED_THRESHOLD:
            outcome = JudgmentOutcome.UNDERVALUED
        elif listed_price > estimated_fair_price * OVERPRICED_THRESHOLD:
            outcome = JudgmentOutcome.OVERPRICED
        else:
            outcome = JudgmentOutcome.FAIRLY_PRICED

        return Judgment(
            outcome=outcome,
            price_diff=price_diff,
            price_diff_rate_percent=price_diff_rate,
        )

    def _calculate_fair_price(self, annual_rent: float, cap_yield_percent: float) -> int:
        """
        Fair price = annual rent ÷ yield.

        The yield is strictly positive by RateTables invariant.
        """
        return round_half_up(annual_rent / (cap_yield_percent / 100))

    def _calculate_implied_yield(self, annual_rent: float, listed_price: float) -> float:
        """Implied yield (%) = annual rent ÷ listed price × 100."""
        if listed_price == 0:
            return 0.0
        return round(annual_rent / listed_price * 100, 2)
