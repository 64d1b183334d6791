"""
Data models for the appraisal engine.

Asset records are owned by the property store; the core only reads them.
AppraisalRecord and AuditEntry field names are shared with the reporting
UI and must be preserved exactly.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from core.errors import ValidationError
from core.income_engine.models import ValuationInput, ValuationResult
from utils.formatting import normalise_walk_time


APPRAISAL_TYPE_RENTAL = "rental"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditLevel(Enum):
    """Severity of an audit entry."""
    SUCCESS = "SUCCESS"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass
class Asset:
    """A listed property as stored in the properties table."""

    id: str
    property_name: str = ""
    building_area: Optional[float] = None
    station_name: Optional[str] = None
    property_type: Optional[str] = None
    building_age: Optional[int] = None
    price: Optional[float] = None

    # Optional fields
    walk_time: Optional[int] = None
    address: str = ""

    def to_valuation_input(self) -> ValuationInput:
        """
        Project to the engine input, defaulting missing fields.

        Raises:
            ValidationError: If a numeric field is malformed
        """
        return ValuationInput.from_raw(
            building_area=self.building_area,
            station_name=self.station_name,
            property_type=self.property_type,
            building_age=self.building_age,
            price=self.price,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialisation."""
        return {
            "id": self.id,
            "property_name": self.property_name,
            "building_area": self.building_area,
            "station_name": self.station_name,
            "property_type": self.property_type,
            "building_age": self.building_age,
            "price": self.price,
            "walk_time": self.walk_time,
            "address": self.address,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Asset":
        """
        Create from a store record.

        Unknown columns are ignored. Numeric columns are kept as stored and
        only validated when projected to a ValuationInput.
        """
        asset_id = data.get("id")
        if asset_id is None or str(asset_id).strip() == "":
            raise ValidationError("asset id is required")

        walk_time = data.get("walk_time")
        return cls(
            id=str(asset_id),
            property_name=data.get("property_name") or "",
            building_area=data.get("building_area"),
            station_name=data.get("station_name"),
            property_type=data.get("property_type"),
            building_age=data.get("building_age"),
            price=data.get("price"),
            walk_time=normalise_walk_time(walk_time) if walk_time is not None else None,
            address=data.get("address") or "",
        )


@dataclass(frozen=True)
class AppraisalRecord:
    """
    Persisted result of one successful valuation.

    Written once per appraisal and never mutated.
    """

    property_id: str
    calculated_rent_yearly: int
    calculated_yield: float
    market_price: int
    rental_judgment: str
    appraisal_type: str = APPRAISAL_TYPE_RENTAL
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def from_valuation(cls, property_id: str, valuation: ValuationResult) -> "AppraisalRecord":
        """Create a rental appraisal record from an engine result."""
        return cls(
            property_id=property_id,
            calculated_rent_yearly=valuation.estimated_annual_rent,
            calculated_yield=valuation.implied_yield_percent,
            market_price=valuation.estimated_fair_price,
            rental_judgment=valuation.judgment.label,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialisation."""
        return {
            "id": self.id,
            "property_id": self.property_id,
            "calculated_rent_yearly": self.calculated_rent_yearly,
            "calculated_yield": self.calculated_yield,
            "market_price": self.market_price,
            "rental_judgment": self.rental_judgment,
            "appraisal_type": self.appraisal_type,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AppraisalRecord":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            property_id=data["property_id"],
            calculated_rent_yearly=data["calculated_rent_yearly"],
            calculated_yield=data["calculated_yield"],
            market_price=data["market_price"],
            rental_judgment=data["rental_judgment"],
            appraisal_type=data.get("appraisal_type", APPRAISAL_TYPE_RENTAL),
            created_at=datetime.fromisoformat(data["created_at"]),
        )


@dataclass(frozen=True)
class AuditEntry:
    """Append-only record of an operation, for operational visibility."""

    category: str
    message: str
    level: AuditLevel = AuditLevel.SUCCESS
    property_id: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialisation."""
        return {
            "id": self.id,
            "category": self.category,
            "message": self.message,
            "level": self.level.value,
            "property_id": self.property_id,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AuditEntry":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            category=data["category"],
            message=data["message"],
            level=AuditLevel(data.get("level", AuditLevel.INFO.value)),
            property_id=data.get("property_id"),
            created_at=datetime.fromisoformat(data["created_at"]),
        )
