"""
Audit Log - Append-only Processing Log

Records one entry per meaningful operation (single appraisal or batch
completion) for operational visibility. The appraisal core only ever
appends; entries are read back by operators and tests.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from core.errors import PersistenceError
from core.models import AuditEntry, AuditLevel

from .repository import quarantine_file


logger = logging.getLogger(__name__)


class AuditLog:
    """
    JSON-backed audit log.

    Entries are kept in memory and, when a path is given, the full log
    is rewritten to file after each append.
    """

    def __init__(self, persist_path: Optional[str] = None):
        self._entries: list[AuditEntry] = []
        self._persist_path = Path(persist_path) if persist_path else None

        if self._persist_path and self._persist_path.exists():
            self._load_from_file()

    def _load_from_file(self) -> None:
        try:
            data = json.loads(self._persist_path.read_text(encoding="utf-8"))
            entries = [AuditEntry.from_dict(raw) for raw in data]
        except (json.JSONDecodeError, KeyError, ValueError, TypeError, AttributeError) as e:
            backup = quarantine_file(self._persist_path)
            logger.warning(
                "Could not load audit log %s (%s); moved to %s",
                self._persist_path,
                e,
                backup,
            )
            return

        self._entries = entries

    def _save_to_file(self) -> None:
        if not self._persist_path:
            return
        try:
            self._persist_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._persist_path, "w", encoding="utf-8") as f:
                json.dump(
                    [entry.to_dict() for entry in self._entries],
                    f,
                    indent=2,
                    ensure_ascii=False,
                )
        except OSError as e:
            raise PersistenceError(f"Could not write audit log: {e.strerror}") from e

    def append(
        self,
        category: str,
        message: str,
        level: AuditLevel = AuditLevel.SUCCESS,
        property_id: Optional[str] = None,
    ) -> AuditEntry:
        """
        Append one entry.

        Args:
            category: Operation category (e.g. 査定処理)
            message: Human-readable description
            level: Severity
            property_id: Related asset, if any

        Returns:
            The appended AuditEntry

        Raises:
            PersistenceError: If the log file cannot be written
        """
        entry = AuditEntry(
            category=category,
            message=message,
            level=level,
            property_id=property_id,
        )
        self._entries.append(entry)
        try:
            self._save_to_file()
        except PersistenceError:
            self._entries.pop()
            raise
        return entry

    def entries(self) -> list[AuditEntry]:
        """All entries, oldest first."""
        return list(self._entries)

    def count(self) -> int:
        return len(self._entries)


# =============================================================================
# Singleton Instance
# =============================================================================

_audit_log_instance: Optional[AuditLog] = None


def get_audit_log(persist_path: Optional[str] = None) -> AuditLog:
    """
    Get the audit log singleton.

    Args:
        persist_path: Optional path for persistence (only used on first call)
    """
    global _audit_log_instance
    if _audit_log_instance is None:
        _audit_log_instance = AuditLog(persist_path or "data/processing_logs.json")
    return _audit_log_instance


def reset_audit_log() -> None:
    """Drop the singleton (for tests)."""
    global _audit_log_instance
    _audit_log_instance = None
