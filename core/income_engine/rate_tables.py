"""
Rate Tables for the Income Valuation Engine

Categorical market rates keyed by location (station/district name) and
asset category. Every lookup is total: unknown keys fall back to a
documented default.

Defaults:
- Rent per area: 3000 JPY/sqm/month
- Rentable ratio: 0.80
- Capitalisation yield: 5.5%
- Rent decay: <=5y 5%, <=10y 10%, <=20y 15%, >20y 20%
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Final, Mapping, Optional, Protocol

from core.errors import ValidationError


# =============================================================================
# Default Rates
# =============================================================================

DEFAULT_RENT_PER_SQM: Final[float] = 3000.0
DEFAULT_RENTABLE_RATIO: Final[float] = 0.80
DEFAULT_CAP_YIELD_PERCENT: Final[float] = 5.5

# (upper bound in years, inclusive) -> decay rate
DEFAULT_DECAY_BANDS: Final[tuple[tuple[int, float], ...]] = (
    (5, 0.05),
    (10, 0.10),
    (20, 0.15),
)
DEFAULT_DECAY_BEYOND_BANDS: Final[float] = 0.20

# Monthly rent per sqm by station, then category
RENT_PER_SQM_TABLE: Final[dict[str, dict[str, float]]] = {
    "渋谷": {"マンション": 4500, "アパート": 3800, "オフィス": 5200, "ホテル": 6000},
    "新宿": {"マンション": 4200, "アパート": 3500, "オフィス": 4800, "ホテル": 5500},
    "池袋": {"マンション": 3800, "アパート": 3200, "オフィス": 4200, "ホテル": 4800},
    "大阪": {"マンション": 3200, "アパート": 2800, "オフィス": 3800, "ホテル": 4200},
    "栄": {"マンション": 2800, "アパート": 2400, "オフィス": 3400, "ホテル": 3800},
}

RENTABLE_RATIO_TABLE: Final[dict[str, float]] = {
    "マンション": 0.85,
    "アパート": 0.80,
    "オフィス": 0.75,
    "ホテル": 0.70,
}

# Capitalisation yield (%) by station, then category
CAP_YIELD_TABLE: Final[dict[str, dict[str, float]]] = {
    "渋谷": {"マンション": 4.2, "アパート": 4.8, "オフィス": 3.8, "ホテル": 5.5},
    "新宿": {"マンション": 4.5, "アパート": 5.0, "オフィス": 4.0, "ホテル": 5.8},
    "池袋": {"マンション": 5.0, "アパート": 5.5, "オフィス": 4.5, "ホテル": 6.2},
    "大阪": {"マンション": 5.5, "アパート": 6.0, "オフィス": 5.0, "ホテル": 6.5},
    "栄": {"マンション": 6.0, "アパート": 6.5, "オフィス": 5.5, "ホテル": 7.0},
}


class RateProvider(Protocol):
    """The four lookups the valuation engine depends on."""

    def rent_per_area(self, location_key: str, category_key: str) -> float: ...

    def rentable_ratio(self, category_key: str) -> float: ...

    def rent_decay_rate(self, building_age_years: int) -> float: ...

    def capitalization_yield_percent(self, location_key: str, category_key: str) -> float: ...


def _freeze_nested(table: Mapping[str, Mapping[str, float]]) -> Mapping[str, Mapping[str, float]]:
    return MappingProxyType({
        outer: MappingProxyType({inner: float(v) for inner, v in row.items()})
        for outer, row in table.items()
    })


def _iter_nested(table: Mapping[str, Mapping[str, float]]):
    for outer, row in table.items():
        for inner, value in row.items():
            yield f"{outer}/{inner}", value


@dataclass(frozen=True)
class RateTables:
    """
    Immutable bundle of rate tables.

    Constructed once and injected into the engine. Invariants are checked
    at construction so lookups never need defensive handling:
    - yields (including the default) are strictly positive
    - rentable ratios are in (0, 1]
    - decay rates are in [0, 1)
    - decay band upper bounds strictly ascend
    """
    rent_per_sqm: Mapping[str, Mapping[str, float]] = field(
        default_factory=lambda: RENT_PER_SQM_TABLE
    )
    rentable_ratios: Mapping[str, float] = field(
        default_factory=lambda: RENTABLE_RATIO_TABLE
    )
    cap_yields: Mapping[str, Mapping[str, float]] = field(
        default_factory=lambda: CAP_YIELD_TABLE
    )
    decay_bands: tuple[tuple[int, float], ...] = DEFAULT_DECAY_BANDS
    decay_beyond_bands: float = DEFAULT_DECAY_BEYOND_BANDS
    default_rent_per_sqm: float = DEFAULT_RENT_PER_SQM
    default_rentable_ratio: float = DEFAULT_RENTABLE_RATIO
    default_cap_yield_percent: float = DEFAULT_CAP_YIELD_PERCENT

    def __post_init__(self):
        """Freeze the tables and enforce rate invariants."""
        object.__setattr__(self, "rent_per_sqm", _freeze_nested(self.rent_per_sqm))
        object.__setattr__(self, "cap_yields", _freeze_nested(self.cap_yields))
        object.__setattr__(
            self,
            "rentable_ratios",
            MappingProxyType({k: float(v) for k, v in self.rentable_ratios.items()}),
        )
        object.__setattr__(
            self,
            "decay_bands",
            tuple((int(upper), float(rate)) for upper, rate in self.decay_bands),
        )
        self._validate()

    def _validate(self) -> None:
        if self.default_cap_yield_percent <= 0:
            raise ValidationError("default_cap_yield_percent must be positive")
        for key, value in _iter_nested(self.cap_yields):
            if value <= 0:
                raise ValidationError(f"cap yield for {key} must be positive")

        if self.default_rent_per_sqm < 0:
            raise ValidationError("default_rent_per_sqm cannot be negative")
        for key, value in _iter_nested(self.rent_per_sqm):
            if value < 0:
                raise ValidationError(f"rent per sqm for {key} cannot be negative")

        ratios = dict(self.rentable_ratios)
        ratios["<default>"] = self.default_rentable_ratio
        for key, value in ratios.items():
            if not 0 < value <= 1:
                raise ValidationError(f"rentable ratio for {key} must be in (0, 1]")

        previous_upper: Optional[int] = None
        for upper, rate in self.decay_bands:
            if previous_upper is not None and upper <= previous_upper:
                raise ValidationError("decay band upper bounds must strictly ascend")
            if not 0 <= rate < 1:
                raise ValidationError(f"decay rate for <= {upper} years must be in [0, 1)")
            previous_upper = upper
        if not 0 <= self.decay_beyond_bands < 1:
            raise ValidationError("decay rate beyond the last band must be in [0, 1)")

    # =========================================================================
    # Lookups
    # =========================================================================

    def rent_per_area(self, location_key: str, category_key: str) -> float:
        """Monthly market rent per sqm for a location and category."""
        row = self.rent_per_sqm.get(location_key)
        if row is None or category_key not in row:
            return self.default_rent_per_sqm
        return row[category_key]

    def rentable_ratio(self, category_key: str) -> float:
        """Fraction of gross building area that generates rent."""
        return self.rentable_ratios.get(category_key, self.default_rentable_ratio)

    def rent_decay_rate(self, building_age_years: int) -> float:
        """Age discount on market rent. Band upper bounds are inclusive."""
        for upper, rate in self.decay_bands:
            if building_age_years <= upper:
                return rate
        return self.decay_beyond_bands

    def capitalization_yield_percent(self, location_key: str, category_key: str) -> float:
        """Market capitalisation yield (%) for a location and category."""
        row = self.cap_yields.get(location_key)
        if row is None or category_key not in row:
            return self.default_cap_yield_percent
        return row[category_key]

    # =========================================================================
    # Extension
    # =========================================================================

    def with_overrides(
        self,
        rent_per_sqm: Optional[Mapping[str, Mapping[str, float]]] = None,
        rentable_ratios: Optional[Mapping[str, float]] = None,
        cap_yields: Optional[Mapping[str, Mapping[str, float]]] = None,
    ) -> "RateTables":
        """
        Return a new bundle with extra or replaced rows.

        Nested rows are merged per location, so adding one category to an
        existing station keeps that station's other categories.
        """
        def merge_nested(base, extra):
            merged = {outer: dict(row) for outer, row in base.items()}
            for outer, row in (extra or {}).items():
                merged.setdefault(outer, {}).update(row)
            return merged

        ratios = dict(self.rentable_ratios)
        ratios.update(rentable_ratios or {})

        return replace(
            self,
            rent_per_sqm=merge_nested(self.rent_per_sqm, rent_per_sqm),
            rentable_ratios=ratios,
            cap_yields=merge_nested(self.cap_yields, cap_yields),
        )


DEFAULT_RATE_TABLES: Final[RateTables] = RateTables()
