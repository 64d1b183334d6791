"""
Exception hierarchy for the appraisal core.

Each error carries a human-readable message that is safe to return
across the transport boundary.
"""


class AppraisalError(Exception):
    """Base exception for all appraisal errors."""


class ValidationError(AppraisalError, ValueError):
    """Raised when required input is missing or malformed."""


class NotFoundError(AppraisalError):
    """Raised when a referenced asset does not exist."""


class PersistenceError(AppraisalError):
    """Raised when the store or audit log cannot read or write."""
