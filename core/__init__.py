"""
Income Appraisal Engine - Core Business Logic

This module provides the appraisal pipeline:
1. Rate Tables (categorical rent, ratio, decay and yield lookups)
2. Income Valuation Engine (fair price, implied yield, judgment)
3. Appraisal Orchestrator (single and batch, per-item failure containment)
4. Persistence (property/appraisal store, append-only audit log)
"""

from .errors import AppraisalError, ValidationError, NotFoundError, PersistenceError
from .models import Asset, AppraisalRecord, AuditEntry, AuditLevel

# Income Valuation Engine v1.0
from .income_engine import (
    ValuationInput,
    RentEstimate,
    Judgment,
    JudgmentOutcome,
    ValuationResult,
    RateProvider,
    RateTables,
    DEFAULT_RATE_TABLES,
    IncomeValuationEngine,
)

# Orchestration and persistence
from .appraisal import (
    AppraisalStore,
    JsonAppraisalStore,
    get_appraisal_store,
    AuditLog,
    get_audit_log,
    AppraisalOrchestrator,
    SingleAppraisal,
    ItemOutcome,
    BatchAppraisalResult,
)

__all__ = [
    # Errors
    "AppraisalError",
    "ValidationError",
    "NotFoundError",
    "PersistenceError",
    # Records
    "Asset",
    "AppraisalRecord",
    "AuditEntry",
    "AuditLevel",
    # Income Valuation Engine v1.0
    "ValuationInput",
    "RentEstimate",
    "Judgment",
    "JudgmentOutcome",
    "ValuationResult",
    "RateProvider",
    "RateTables",
    "DEFAULT_RATE_TABLES",
    "IncomeValuationEngine",
    # Orchestration and persistence
    "AppraisalStore",
    "JsonAppraisalStore",
    "get_appraisal_store",
    "AuditLog",
    "get_audit_log",
    "AppraisalOrchestrator",
    "SingleAppraisal",
    "ItemOutcome",
    "BatchAppraisalResult",
]
