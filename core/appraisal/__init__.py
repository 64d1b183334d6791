"""
Appraisal Orchestration

Single-asset and batch appraisal over a property store, with
per-item failure containment and an append-only audit log.
"""

from .repository import (
    AppraisalStore,
    JsonAppraisalStore,
    get_appraisal_store,
    reset_appraisal_store,
)
from .audit_log import (
    AuditLog,
    get_audit_log,
    reset_audit_log,
)
from .orchestrator import (
    AppraisalOrchestrator,
    SingleAppraisal,
    ItemOutcome,
    BatchAppraisalResult,
    DEFAULT_BATCH_LIMIT,
    AUDIT_CATEGORY_SINGLE,
    AUDIT_CATEGORY_BATCH,
)
from .sample_data import SAMPLE_PROPERTIES, create_sample_assets

__all__ = [
    # Store
    "AppraisalStore",
    "JsonAppraisalStore",
    "get_appraisal_store",
    "reset_appraisal_store",
    # Audit
    "AuditLog",
    "get_audit_log",
    "reset_audit_log",
    # Orchestrator
    "AppraisalOrchestrator",
    "SingleAppraisal",
    "ItemOutcome",
    "BatchAppraisalResult",
    "DEFAULT_BATCH_LIMIT",
    "AUDIT_CATEGORY_SINGLE",
    "AUDIT_CATEGORY_BATCH",
    # Sample data
    "SAMPLE_PROPERTIES",
    "create_sample_assets",
]
