"""
Tests for the Appraisal Orchestrator

Tests covering:
1. Single appraisal persists one record and one audit entry
2. Missing ID and unknown asset are rejected
3. Batch selects only unappraised assets, in order, up to the limit
4. Per-item failures never abort the batch or leave partial records
5. Exactly one summary audit entry per batch
6. Audit failures never undo a persisted appraisal
"""

from __future__ import annotations

import pytest

from core.appraisal import (
    AUDIT_CATEGORY_BATCH,
    AUDIT_CATEGORY_SINGLE,
    AppraisalOrchestrator,
    AuditLog,
    JsonAppraisalStore,
    create_sample_assets,
)
from core.appraisal.orchestrator import UNEXPECTED_FAILURE_REASON
from core.errors import NotFoundError, PersistenceError, ValidationError
from core.income_engine import IncomeValuationEngine, JudgmentOutcome
from core.models import AppraisalRecord, Asset, AuditLevel


# =============================================================================
# Fixtures
# =============================================================================


class FlakyStore(JsonAppraisalStore):
    """Store that fails inserts for selected assets."""

    def __init__(self, failing_ids=(), **kwargs):
        super().__init__(**kwargs)
        self.failing_ids = set(failing_ids)

    def insert_appraisal(self, record: AppraisalRecord) -> AppraisalRecord:
        if record.property_id in self.failing_ids:
            raise PersistenceError("Failed to save appraisal result")
        return super().insert_appraisal(record)


class BrokenSelectionStore(JsonAppraisalStore):
    """Store whose anti-join query fails."""

    def list_unappraised_assets(self, limit: int) -> list[Asset]:
        raise PersistenceError("Failed to fetch properties")


class BrokenAuditLog(AuditLog):
    """Audit log that cannot be written."""

    def append(self, *args, **kwargs):
        raise PersistenceError("Could not write audit log")


class ExplodingEngine(IncomeValuationEngine):
    """Engine that fails unexpectedly for one asset."""

    def __init__(self, failing_id: str):
        super().__init__()
        self.failing_id = failing_id

    def appraise_asset(self, asset):
        if asset.id == self.failing_id:
            raise RuntimeError("boom")
        return super().appraise_asset(asset)


def make_asset(asset_id: str, **overrides) -> Asset:
    fields = dict(
        id=asset_id,
        property_name=f"物件{asset_id}",
        building_area=500,
        station_name="新宿",
        property_type="アパート",
        building_age=8,
        price=60000000,
    )
    fields.update(overrides)
    return Asset(**fields)


@pytest.fixture
def store():
    store = JsonAppraisalStore()
    store.add_assets(create_sample_assets())
    return store


@pytest.fixture
def audit_log():
    return AuditLog()


@pytest.fixture
def orchestrator(store, audit_log):
    return AppraisalOrchestrator(store, audit_log)


# =============================================================================
# Single Appraisal
# =============================================================================


class TestAppraiseOne:
    """Single-asset path."""

    def test_persists_record(self, orchestrator, store):
        appraisal = orchestrator.appraise_one("sample-001")

        assert appraisal.record.property_id == "sample-001"
        assert appraisal.record.market_price == 1161160714
        assert appraisal.record.calculated_rent_yearly == 48768750
        assert appraisal.record.rental_judgment == JudgmentOutcome.UNDERVALUED.value
        assert appraisal.record.appraisal_type == "rental"
        assert store.list_appraisals("sample-001") == [appraisal.record]

    def test_appends_one_audit_entry(self, orchestrator, audit_log):
        orchestrator.appraise_one("sample-001")

        entries = audit_log.entries()
        assert len(entries) == 1
        assert entries[0].category == AUDIT_CATEGORY_SINGLE
        assert entries[0].message == "物件「パークマンション渋谷」の査定を実行しました"
        assert entries[0].level == AuditLevel.SUCCESS
        assert entries[0].property_id == "sample-001"

    def test_returns_valuation(self, orchestrator):
        appraisal = orchestrator.appraise_one("sample-001")

        assert appraisal.asset.property_name == "パークマンション渋谷"
        assert appraisal.valuation.estimated_fair_price == appraisal.record.market_price

    @pytest.mark.parametrize("asset_id", [None, "", "   "])
    def test_missing_id_rejected(self, orchestrator, store, asset_id):
        with pytest.raises(ValidationError):
            orchestrator.appraise_one(asset_id)
        assert store.count_appraisals() == 0

    def test_unknown_asset_not_found(self, orchestrator, store, audit_log):
        with pytest.raises(NotFoundError):
            orchestrator.appraise_one("missing")
        assert store.count_appraisals() == 0
        assert audit_log.count() == 0

    def test_persistence_failure_propagates(self, audit_log):
        store = FlakyStore(failing_ids={"A"})
        store.add_asset(make_asset("A"))
        orchestrator = AppraisalOrchestrator(store, audit_log)

        with pytest.raises(PersistenceError):
            orchestrator.appraise_one("A")
        assert store.count_appraisals() == 0
        assert audit_log.count() == 0

    def test_malformed_asset_rejected(self, orchestrator, store):
        store.add_asset(make_asset("BAD", building_area=-100))

        with pytest.raises(ValidationError):
            orchestrator.appraise_one("BAD")
        assert store.list_appraisals("BAD") == []

    def test_audit_failure_keeps_appraisal(self, store):
        orchestrator = AppraisalOrchestrator(store, BrokenAuditLog())

        appraisal = orchestrator.appraise_one("sample-002")

        assert store.list_appraisals("sample-002") == [appraisal.record]

    def test_injected_engine_is_used(self, store, audit_log):
        class FixedEngine(IncomeValuationEngine):
            def appraise_asset(self, asset):
                result = super().appraise_asset(asset)
                return result.__class__(
                    rent_estimate=result.rent_estimate,
                    estimated_fair_price=1,
                    implied_yield_percent=result.implied_yield_percent,
                    judgment=result.judgment,
                )

        orchestrator = AppraisalOrchestrator(store, audit_log, engine=FixedEngine())

        assert orchestrator.appraise_one("sample-003").record.market_price == 1


# =============================================================================
# Batch Appraisal
# =============================================================================


class TestAppraiseBatch:
    """Batch path."""

    def test_appraises_all_pending(self, orchestrator, store):
        batch = orchestrator.appraise_batch()

        assert batch.selected_count == 5
        assert batch.processed_count == 5
        assert [o.asset_id for o in batch.results] == [
            "sample-001", "sample-002", "sample-003", "sample-004", "sample-005",
        ]
        assert store.count_appraisals() == 5

    def test_respects_limit(self, orchestrator, store):
        batch = orchestrator.appraise_batch(max_items=2)

        assert batch.processed_count == 2
        assert [o.asset_id for o in batch.results] == ["sample-001", "sample-002"]

    def test_skips_already_appraised(self, orchestrator, store):
        orchestrator.appraise_one("sample-001")
        orchestrator.appraise_one("sample-003")

        batch = orchestrator.appraise_batch()

        assert [o.asset_id for o in batch.results] == ["sample-002", "sample-004", "sample-005"]
        assert len(store.list_appraisals("sample-001")) == 1

    def test_second_batch_finds_nothing(self, orchestrator, store, audit_log):
        orchestrator.appraise_batch()
        entries_after_first = audit_log.count()

        batch = orchestrator.appraise_batch()

        assert batch.selected_count == 0
        assert batch.processed_count == 0
        assert batch.outcomes == []
        assert store.count_appraisals() == 5
        assert audit_log.count() == entries_after_first

    def test_processed_never_exceeds_limit_or_eligible(self, orchestrator):
        for limit in (1, 3, 10):
            batch = orchestrator.appraise_batch(max_items=limit)
            assert batch.processed_count <= limit

        assert orchestrator.appraise_batch(max_items=10).processed_count == 0

    def test_one_summary_audit_entry(self, orchestrator, audit_log):
        orchestrator.appraise_batch()

        entries = audit_log.entries()
        assert len(entries) == 1
        assert entries[0].category == AUDIT_CATEGORY_BATCH
        assert entries[0].message == "5件の物件を一括査定しました"
        assert entries[0].property_id is None

    @pytest.mark.parametrize("limit", [0, -1])
    def test_invalid_limit_rejected(self, orchestrator, limit):
        with pytest.raises(ValidationError):
            orchestrator.appraise_batch(max_items=limit)

    def test_selection_failure_propagates(self, audit_log):
        orchestrator = AppraisalOrchestrator(BrokenSelectionStore(), audit_log)

        with pytest.raises(PersistenceError):
            orchestrator.appraise_batch()
        assert audit_log.count() == 0


class TestBatchFailureContainment:
    """Failing items are reported, not fatal."""

    @pytest.fixture
    def mixed_store(self):
        store = FlakyStore(failing_ids={"B"})
        store.add_assets([
            make_asset("A"),
            make_asset("B"),
            make_asset("C", building_area="not a number"),
            make_asset("D"),
        ])
        return store

    def test_failures_do_not_abort(self, mixed_store, audit_log):
        batch = AppraisalOrchestrator(mixed_store, audit_log).appraise_batch()

        assert batch.selected_count == 4
        assert batch.processed_count == 2
        assert [o.asset_id for o in batch.results] == ["A", "D"]

    def test_failure_reasons_reported(self, mixed_store, audit_log):
        batch = AppraisalOrchestrator(mixed_store, audit_log).appraise_batch()

        failures = {o.asset_id: o for o in batch.failures}
        assert set(failures) == {"B", "C"}
        assert failures["B"].reason == "Failed to save appraisal result"
        assert "building_area" in failures["C"].reason
        assert all(o.record is None for o in failures.values())

    def test_malformed_types_get_specific_reasons(self, audit_log):
        store = JsonAppraisalStore()
        store.add_assets([
            make_asset("K", station_name=123),
            make_asset("P", price=10**400),
        ])

        batch = AppraisalOrchestrator(store, audit_log).appraise_batch()

        failures = {o.asset_id: o.reason for o in batch.failures}
        assert "station_name" in failures["K"]
        assert "price" in failures["P"]
        assert UNEXPECTED_FAILURE_REASON not in failures.values()

    def test_outcomes_keep_selection_order(self, mixed_store, audit_log):
        batch = AppraisalOrchestrator(mixed_store, audit_log).appraise_batch()

        assert [o.asset_id for o in batch.outcomes] == ["A", "B", "C", "D"]
        assert [o.succeeded for o in batch.outcomes] == [True, False, False, True]

    def test_no_partial_records(self, mixed_store, audit_log):
        AppraisalOrchestrator(mixed_store, audit_log).appraise_batch()

        assert mixed_store.list_appraisals("B") == []
        assert mixed_store.list_appraisals("C") == []

    def test_summary_counts_successes_only(self, mixed_store, audit_log):
        AppraisalOrchestrator(mixed_store, audit_log).appraise_batch()

        entries = audit_log.entries()
        assert len(entries) == 1
        assert entries[0].message == "2件の物件を一括査定しました"

    def test_failed_items_are_retried_by_next_batch(self, mixed_store, audit_log):
        orchestrator = AppraisalOrchestrator(mixed_store, audit_log)
        orchestrator.appraise_batch()
        mixed_store.failing_ids.clear()

        batch = orchestrator.appraise_batch()

        assert [o.asset_id for o in batch.results] == ["B"]
        assert [o.asset_id for o in batch.failures] == ["C"]

    def test_unexpected_error_contained(self, audit_log):
        store = JsonAppraisalStore()
        store.add_assets([make_asset("A"), make_asset("B")])
        orchestrator = AppraisalOrchestrator(store, audit_log, engine=ExplodingEngine("A"))

        batch = orchestrator.appraise_batch()

        assert [o.asset_id for o in batch.results] == ["B"]
        assert batch.failures[0].reason == UNEXPECTED_FAILURE_REASON

    def test_all_items_failing_still_audited(self, audit_log):
        store = FlakyStore(failing_ids={"A", "B"})
        store.add_assets([make_asset("A"), make_asset("B")])

        batch = AppraisalOrchestrator(store, audit_log).appraise_batch()

        assert batch.processed_count == 0
        assert audit_log.entries()[0].message == "0件の物件を一括査定しました"

    def test_audit_failure_keeps_batch_results(self, store):
        batch = AppraisalOrchestrator(store, BrokenAuditLog()).appraise_batch()

        assert batch.processed_count == 5
        assert store.count_appraisals() == 5


# =============================================================================
# Uniqueness
# =============================================================================


class TestUniquePerAsset:
    """A store-level uniqueness constraint turns duplicates into failures."""

    def test_second_single_appraisal_rejected(self, audit_log):
        store = JsonAppraisalStore(unique_per_asset=True)
        store.add_asset(make_asset("A"))
        orchestrator = AppraisalOrchestrator(store, audit_log)

        orchestrator.appraise_one("A")
        with pytest.raises(PersistenceError):
            orchestrator.appraise_one("A")
        assert store.count_appraisals() == 1

    def test_repeat_single_appraisal_allowed_by_default(self, orchestrator, store):
        orchestrator.appraise_one("sample-001")
        orchestrator.appraise_one("sample-001")

        assert len(store.list_appraisals("sample-001")) == 2
