"""
Data models for the Income Valuation Engine

Defines the validated engine input, the intermediate rent estimate
and the valuation result with its price judgment.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from core.errors import ValidationError


class JudgmentOutcome(Enum):
    """
    Price judgment against the estimated fair price.

    Values are the labels persisted in ``rental_judgment`` and read by
    the reporting UI, so they must not change.

    Undervalued: listed < 90% of fair price
    Overpriced: listed > 110% of fair price
    Fairly priced: anything in between (boundaries included)
    Indeterminate: listed price or fair price is zero/unknown
    """
    UNDERVALUED = "割安"
    FAIRLY_PRICED = "適正"
    OVERPRICED = "割高"
    INDETERMINATE = "判定不能"


def _coerce_number(name: str, value: Any) -> float:
    """Coerce a raw field to a finite, non-negative float (None -> 0)."""
    if value is None or value == "":
        return 0.0
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a number")
    try:
        number = float(value)
    except OverflowError:
        raise ValidationError(f"{name} is out of range")
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(number):
        raise ValidationError(f"{name} must be a finite number")
    if number < 0:
        raise ValidationError(f"{name} cannot be negative")
    return number


def _coerce_key(name: str, value: Any) -> str:
    """Coerce a raw lookup key to a stripped string (None -> "")."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be text, got {value!r}")
    return value.strip()


@dataclass(frozen=True)
class ValuationInput:
    """
    Validated projection of the five asset fields the engine needs.

    Always fully populated: missing numbers are 0 and missing strings
    are empty. Negative or non-finite numbers are rejected.
    """
    building_area_sqm: float = 0.0
    location_key: str = ""
    category_key: str = ""
    building_age_years: int = 0
    listed_price: float = 0.0

    def __post_init__(self):
        """Validate numeric fields after initialization."""
        for name in ("building_area_sqm", "building_age_years", "listed_price"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValidationError(f"{name} must be a number")
            if not math.isfinite(value):
                raise ValidationError(f"{name} must be a finite number")
            if value < 0:
                raise ValidationError(f"{name} cannot be negative")
        if int(self.building_age_years) != self.building_age_years:
            raise ValidationError("building_age_years must be a whole number")

    @classmethod
    def from_raw(
        cls,
        building_area: Any = None,
        station_name: Optional[str] = None,
        property_type: Optional[str] = None,
        building_age: Any = None,
        price: Any = None,
    ) -> "ValuationInput":
        """
        Build an input from loosely typed record values.

        Args:
            building_area: Gross building area in sqm
            station_name: Station or district used as location key
            property_type: Asset category key
            building_age: Building age in years
            price: Listed price (0 when unknown)

        Returns:
            ValuationInput with defaults applied

        Raises:
            ValidationError: If a numeric value is malformed
        """
        age = _coerce_number("building_age", building_age)
        if age != int(age):
            raise ValidationError("building_age must be a whole number")

        return cls(
            building_area_sqm=_coerce_number("building_area", building_area),
            location_key=_coerce_key("station_name", station_name),
            category_key=_coerce_key("property_type", property_type),
            building_age_years=int(age),
            listed_price=_coerce_number("price", price),
        )


@dataclass(frozen=True)
class RentEstimate:
    """Rentable area and age-adjusted rent derived from the rate tables."""
    rentable_area_sqm: float
    adjusted_monthly_rent: float
    adjusted_annual_rent: float


@dataclass(frozen=True)
class Judgment:
    """Judgment outcome with the signed gap to the fair price."""
    outcome: JudgmentOutcome
    price_diff: float = 0
    price_diff_rate_percent: float = 0.0

    @property
    def is_undervalued(self) -> bool:
        return self.outcome is JudgmentOutcome.UNDERVALUED

    @property
    def label(self) -> str:
        return self.outcome.value

    def to_dict(self) -> dict:
        """Convert to the transport shape used by the appraisal API."""
        return {
            "isUndervalued": self.is_undervalued,
            "judgment": self.label,
            "priceDiff": self.price_diff,
            "priceDiffRate": self.price_diff_rate_percent,
        }


@dataclass(frozen=True)
class ValuationResult:
    """
    Complete income-approach valuation of one asset.

    estimated_fair_price is the capitalised annual rent, rounded to a
    whole currency unit. implied_yield_percent is annual rent over the
    listed price (0 when the price is unknown).
    """
    rent_estimate: RentEstimate
    estimated_fair_price: int
    implied_yield_percent: float
    judgment: Judgment

    @property
    def estimated_annual_rent(self) -> int:
        """Annual rent rounded to a whole currency unit, as persisted."""
        return math.floor(self.rent_estimate.adjusted_annual_rent + 0.5)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "calculatedRentYearly": self.estimated_annual_rent,
            "calculatedYield": self.implied_yield_percent,
            "marketPrice": self.estimated_fair_price,
            "judgment": self.judgment.to_dict(),
        }
