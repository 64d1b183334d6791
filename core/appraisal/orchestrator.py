"""
Appraisal Orchestrator - Single and Batch Appraisal

Runs the income valuation for one asset or for a worklist of assets
that have not been appraised yet, persisting each success and writing
audit entries.

Batch items are processed sequentially in selection order. A failing
item never aborts the batch and never leaves a partial record; its
reason is returned in the batch outcomes.

The anti-join selection is the only guard against re-appraisal. Two
concurrent batches may select the same asset; exactly-once semantics
require a uniqueness constraint in the store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Final, Optional

from core.errors import AppraisalError, NotFoundError, PersistenceError, ValidationError
from core.income_engine import IncomeValuationEngine, ValuationResult
from core.models import AppraisalRecord, Asset, AuditLevel

from .audit_log import AuditLog
from .repository import AppraisalStore


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================

DEFAULT_BATCH_LIMIT: Final[int] = 10

AUDIT_CATEGORY_SINGLE: Final[str] = "査定処理"
AUDIT_CATEGORY_BATCH: Final[str] = "一括査定"

UNEXPECTED_FAILURE_REASON: Final[str] = "Unexpected error during appraisal"


# =============================================================================
# Results
# =============================================================================


@dataclass
class SingleAppraisal:
    """Outcome of a successful single-asset appraisal."""
    asset: Asset
    valuation: ValuationResult
    record: AppraisalRecord


@dataclass
class ItemOutcome:
    """
    Outcome of one batch item.

    Exactly one of record (success) or reason (failure) is set.
    """
    asset_id: str
    asset_name: str = ""
    record: Optional[AppraisalRecord] = None
    reason: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.record is not None


@dataclass
class BatchAppraisalResult:
    """Outcome of a batch run, in selection order."""
    selected_count: int = 0
    outcomes: list[ItemOutcome] = field(default_factory=list)

    @property
    def results(self) -> list[ItemOutcome]:
        """Successful items only."""
        return [o for o in self.outcomes if o.succeeded]

    @property
    def failures(self) -> list[ItemOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    @property
    def processed_count(self) -> int:
        """Number of successful appraisals."""
        return len(self.results)


# =============================================================================
# Orchestrator
# =============================================================================


class AppraisalOrchestrator:
    """
    Coordinates store reads, valuation, persistence and audit.

    Holds no state between calls beyond its collaborators.
    """

    def __init__(
        self,
        store: AppraisalStore,
        audit_log: AuditLog,
        engine: Optional[IncomeValuationEngine] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            store: Asset and appraisal persistence
            audit_log: Append-only processing log
            engine: Valuation engine (default: built-in rate tables)
        """
        self._store = store
        self._audit_log = audit_log
        self._engine = engine or IncomeValuationEngine()

    def appraise_one(self, asset_id: Optional[str]) -> SingleAppraisal:
        """
        Appraise one asset and record it.

        Args:
            asset_id: ID of the asset to appraise

        Returns:
            SingleAppraisal with the stored record

        Raises:
            ValidationError: If asset_id is missing or the asset data is malformed
            NotFoundError: If no asset has this ID
            PersistenceError: If the asset cannot be read or the record saved
        """
        if asset_id is None or str(asset_id).strip() == "":
            raise ValidationError("Property ID is required")

        asset = self._store.get_asset(str(asset_id))
        if asset is None:
            raise NotFoundError("Property not found")

        appraisal = self._appraise_asset(asset)

        self._append_audit(
            category=AUDIT_CATEGORY_SINGLE,
            message=f"物件「{asset.property_name}」の査定を実行しました",
            property_id=asset.id,
        )
        logger.info(
            "Appraised property %s: %s",
            asset.id,
            appraisal.valuation.judgment.label,
        )
        return appraisal

    def appraise_batch(self, max_items: int = DEFAULT_BATCH_LIMIT) -> BatchAppraisalResult:
        """
        Appraise up to max_items assets that have no appraisal yet.

        Args:
            max_items: Maximum number of assets to select

        Returns:
            BatchAppraisalResult with one outcome per selected asset

        Raises:
            ValidationError: If max_items is less than 1
            PersistenceError: If the selection query fails
        """
        if max_items < 1:
            raise ValidationError("max_items must be at least 1")

        assets = self._store.list_unappraised_assets(max_items)
        batch = BatchAppraisalResult(selected_count=len(assets))

        if not assets:
            logger.info("No properties to appraise")
            return batch

        for asset in assets:
            batch.outcomes.append(self._appraise_batch_item(asset))

        self._append_audit(
            category=AUDIT_CATEGORY_BATCH,
            message=f"{batch.processed_count}件の物件を一括査定しました",
        )
        logger.info(
            "Batch appraisal finished: %d succeeded, %d failed",
            batch.processed_count,
            len(batch.failures),
        )
        return batch

    def _appraise_batch_item(self, asset: Asset) -> ItemOutcome:
        """Appraise one batch item, containing any failure."""
        try:
            appraisal = self._appraise_asset(asset)
        except AppraisalError as e:
            logger.warning("Appraisal of property %s failed: %s", asset.id, e)
            return ItemOutcome(asset_id=asset.id, asset_name=asset.property_name, reason=str(e))
        except Exception:
            logger.exception("Unexpected error appraising property %s", asset.id)
            return ItemOutcome(
                asset_id=asset.id,
                asset_name=asset.property_name,
                reason=UNEXPECTED_FAILURE_REASON,
            )

        return ItemOutcome(
            asset_id=asset.id,
            asset_name=asset.property_name,
            record=appraisal.record,
        )

    def _appraise_asset(self, asset: Asset) -> SingleAppraisal:
        """Value an asset and persist the record. Nothing is stored on failure."""
        valuation = self._engine.appraise_asset(asset)
        record = AppraisalRecord.from_valuation(asset.id, valuation)
        stored = self._store.insert_appraisal(record)
        return SingleAppraisal(asset=asset, valuation=valuation, record=stored)

    def _append_audit(
        self,
        category: str,
        message: str,
        property_id: Optional[str] = None,
    ) -> None:
        """Append an audit entry. A failed append does not undo the appraisal."""
        try:
            self._audit_log.append(
                category=category,
                message=message,
                level=AuditLevel.SUCCESS,
                property_id=property_id,
            )
        except PersistenceError as e:
            logger.warning("Could not record audit entry %s: %s", category, e)
