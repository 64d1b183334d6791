"""
Appraisal Store - Property and Appraisal Record Storage

Provides the read/write/filter operations the orchestrator needs:
asset lookup, the "assets without an appraisal" anti-join, and
appraisal inserts.

JsonAppraisalStore is an in-memory implementation with optional JSON
file persistence. Production deployments can supply any AppraisalStore.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from core.errors import PersistenceError
from core.models import AppraisalRecord, Asset


logger = logging.getLogger(__name__)


def quarantine_file(path: Path) -> Path:
    """
    Rename an unreadable data file aside and return its new path.

    Raises:
        PersistenceError: If the file cannot be renamed
    """
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%f")
    backup = path.with_name(f"{path.name}.corrupt-{stamp}")
    try:
        path.rename(backup)
    except OSError as e:
        raise PersistenceError(f"Could not move aside unreadable file {path}: {e.strerror}") from e
    return backup


# =============================================================================
# Store Interface
# =============================================================================


class AppraisalStore(ABC):
    """
    Persistence adapter for assets and appraisal records.

    Implementations raise PersistenceError when a read or write fails.
    """

    @abstractmethod
    def get_asset(self, asset_id: str) -> Optional[Asset]:
        """Get an asset by ID, or None if absent."""
        pass

    @abstractmethod
    def list_unappraised_assets(self, limit: int) -> list[Asset]:
        """
        Select up to ``limit`` assets that have no appraisal record.

        Order is the store's natural order and is preserved by callers.
        """
        pass

    @abstractmethod
    def insert_appraisal(self, record: AppraisalRecord) -> AppraisalRecord:
        """Persist an appraisal record and return it as stored."""
        pass

    @abstractmethod
    def list_appraisals(self, property_id: Optional[str] = None) -> list[AppraisalRecord]:
        """List appraisal records, optionally for one asset, newest first."""
        pass


# =============================================================================
# JSON Store
# =============================================================================


class JsonAppraisalStore(AppraisalStore):
    """
    In-memory store with optional file persistence.

    Assets keep insertion order, which is the selection order of the
    anti-join. With unique_per_asset=True, a second appraisal for the
    same asset is rejected like a database uniqueness constraint.
    """

    def __init__(
        self,
        persist_path: Optional[str] = None,
        unique_per_asset: bool = False,
    ):
        """
        Initialise store.

        Args:
            persist_path: Optional path to persist data to JSON file
            unique_per_asset: Reject more than one appraisal per asset
        """
        self._assets: dict[str, Asset] = {}
        self._appraisals: list[AppraisalRecord] = []
        self._unique_per_asset = unique_per_asset
        self._persist_path = Path(persist_path) if persist_path else None

        if self._persist_path and self._persist_path.exists():
            self._load_from_file()

    def _save_to_file(self) -> None:
        """Persist data to file."""
        if not self._persist_path:
            return

        data = {
            "properties": [asset.to_dict() for asset in self._assets.values()],
            "appraisals": [record.to_dict() for record in self._appraisals],
            "saved_at": datetime.now(timezone.utc).isoformat(),
        }

        try:
            self._persist_path.parent.mkdir(parents=True, exist_ok=True)
            self._persist_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Could not write appraisal store: {e.strerror}") from e

    def _load_from_file(self) -> None:
        """
        Load data from file.

        The file is applied only if every row parses. An unreadable file
        is moved aside before starting fresh so the next save cannot
        overwrite it.
        """
        try:
            data = json.loads(self._persist_path.read_text(encoding="utf-8"))
            assets = [Asset.from_dict(raw) for raw in data.get("properties", [])]
            appraisals = [AppraisalRecord.from_dict(raw) for raw in data.get("appraisals", [])]
        except (json.JSONDecodeError, KeyError, ValueError, TypeError, AttributeError) as e:
            backup = quarantine_file(self._persist_path)
            logger.warning(
                "Could not load appraisal store %s (%s); moved to %s",
                self._persist_path,
                e,
                backup,
            )
            return

        self._assets = {asset.id: asset for asset in assets}
        self._appraisals = appraisals

    # =========================================================================
    # Assets
    # =========================================================================

    def add_asset(self, asset: Asset) -> Asset:
        """
        Add or replace an asset.

        Asset records belong to the property catalogue; this exists for
        seeding and tests.
        """
        self._assets[asset.id] = asset
        self._save_to_file()
        return asset

    def add_assets(self, assets: Iterable[Asset]) -> int:
        """Add several assets with a single write. Returns the count added."""
        count = 0
        for asset in assets:
            self._assets[asset.id] = asset
            count += 1
        self._save_to_file()
        return count

    def get_asset(self, asset_id: str) -> Optional[Asset]:
        return self._assets.get(asset_id)

    def list_assets(self) -> list[Asset]:
        """Get all assets in insertion order."""
        return list(self._assets.values())

    def count_assets(self) -> int:
        return len(self._assets)

    def list_unappraised_assets(self, limit: int) -> list[Asset]:
        appraised = {record.property_id for record in self._appraisals}
        result = []
        for asset in self._assets.values():
            if len(result) >= limit:
                break
            if asset.id not in appraised:
                result.append(asset)
        return result

    # =========================================================================
    # Appraisals
    # =========================================================================

    def insert_appraisal(self, record: AppraisalRecord) -> AppraisalRecord:
        if self._unique_per_asset and any(
            existing.property_id == record.property_id for existing in self._appraisals
        ):
            raise PersistenceError(
                f"Appraisal already exists for property {record.property_id}"
            )

        self._appraisals.append(record)
        try:
            self._save_to_file()
        except PersistenceError:
            # Keep memory consistent with the file
            self._appraisals.remove(record)
            raise
        return record

    def list_appraisals(self, property_id: Optional[str] = None) -> list[AppraisalRecord]:
        records = [
            r for r in self._appraisals
            if property_id is None or r.property_id == property_id
        ]
        return sorted(records, key=lambda r: r.created_at, reverse=True)

    def count_appraisals(self) -> int:
        return len(self._appraisals)


# =============================================================================
# Singleton Instance
# =============================================================================

_store_instance: Optional[JsonAppraisalStore] = None


def get_appraisal_store(
    persist_path: Optional[str] = None,
    unique_per_asset: bool = False,
) -> JsonAppraisalStore:
    """
    Get the appraisal store singleton.

    Args:
        persist_path: Optional path for persistence (only used on first call)
        unique_per_asset: Uniqueness flag (only used on first call)

    Returns:
        JsonAppraisalStore instance
    """
    global _store_instance
    if _store_instance is None:
        _store_instance = JsonAppraisalStore(
            persist_path or "data/appraisal_store.json",
            unique_per_asset=unique_per_asset,
        )
    return _store_instance


def reset_appraisal_store() -> None:
    """Drop the singleton (for tests)."""
    global _store_instance
    _store_instance = None
