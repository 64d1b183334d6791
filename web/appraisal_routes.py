"""
Appraisal Routes - JSON API for Single and Batch Appraisal

POST /api/appraisal  {propertyId}  appraise one property
PUT  /api/appraisal                appraise pending properties in a batch
GET  /api/appraisal  ?propertyId=  list stored appraisals

Error bodies carry a human-readable message only; stack traces and
internal identifiers never leave the server.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from core.appraisal import (
    AppraisalOrchestrator,
    AppraisalStore,
    get_appraisal_store,
    get_audit_log,
)
from core.errors import NotFoundError, PersistenceError, ValidationError
from utils.config import Config


logger = logging.getLogger(__name__)


# =============================================================================
# Router Setup
# =============================================================================

router = APIRouter(prefix="/api", tags=["appraisal"])


class AppraisalRequest(BaseModel):
    """Request body for a single appraisal."""
    propertyId: Optional[Union[str, int]] = None


# =============================================================================
# Dependencies
# =============================================================================


def get_store() -> AppraisalStore:
    """Store singleton configured from the environment."""
    config = Config.load()
    return get_appraisal_store(
        str(config.store_path),
        unique_per_asset=config.unique_appraisals,
    )


def get_orchestrator(store: AppraisalStore = Depends(get_store)) -> AppraisalOrchestrator:
    """Orchestrator over the configured store and audit log."""
    config = Config.load()
    return AppraisalOrchestrator(store, get_audit_log(str(config.audit_log_path)))


def get_batch_limit() -> int:
    return Config.load().batch_limit


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


async def _read_property_id(request: Request) -> Optional[str]:
    """Extract propertyId from the JSON body; None when missing or unreadable."""
    try:
        body = await request.json()
        payload = AppraisalRequest.model_validate(body)
    except (ValueError, PydanticValidationError):
        return None

    # 0, false and "" count as missing
    if not payload.propertyId:
        return None
    property_id = str(payload.propertyId).strip()
    return property_id or None


# =============================================================================
# Routes
# =============================================================================


@router.post("/appraisal")
async def appraise_property(
    request: Request,
    orchestrator: AppraisalOrchestrator = Depends(get_orchestrator),
):
    """
    Appraise a single property.

    Returns:
        200 {success, appraisal, result}
        400 if propertyId is missing or the property data is invalid
        404 if the property does not exist
        500 if the appraisal cannot be saved
    """
    property_id = await _read_property_id(request)
    if property_id is None:
        return _error("Property ID is required", 400)

    try:
        appraisal = orchestrator.appraise_one(property_id)
    except NotFoundError:
        return _error("Property not found", 404)
    except ValidationError as e:
        return _error(str(e), 400)
    except PersistenceError as e:
        logger.error("Failed to save appraisal for %s: %s", property_id, e)
        return _error("Failed to save appraisal result", 500)
    except Exception:
        logger.exception("Appraisal API error")
        return _error("Internal server error", 500)

    return JSONResponse({
        "success": True,
        "appraisal": appraisal.record.to_dict(),
        "result": appraisal.valuation.to_dict(),
    })


@router.put("/appraisal")
async def appraise_batch(
    orchestrator: AppraisalOrchestrator = Depends(get_orchestrator),
    batch_limit: int = Depends(get_batch_limit),
):
    """
    Appraise up to the batch limit of properties with no appraisal.

    Per-property failures are left out of results; only a selection
    failure fails the request.
    """
    try:
        batch = orchestrator.appraise_batch(max_items=batch_limit)
    except PersistenceError as e:
        logger.error("Failed to fetch properties for batch appraisal: %s", e)
        return _error("Failed to fetch properties", 500)
    except Exception:
        logger.exception("Batch appraisal API error")
        return _error("Internal server error", 500)

    if batch.selected_count == 0:
        return JSONResponse({
            "success": True,
            "message": "No properties to appraise",
            "processed": 0,
        })

    return JSONResponse({
        "success": True,
        "processed": batch.processed_count,
        "results": [
            {
                "propertyId": outcome.asset_id,
                "propertyName": outcome.asset_name,
                "result": outcome.record.to_dict(),
            }
            for outcome in batch.results
        ],
    })


@router.get("/appraisal")
async def list_appraisals(
    property_id: Optional[str] = Query(None, alias="propertyId"),
    store: AppraisalStore = Depends(get_store),
):
    """List stored appraisals, newest first, optionally for one property."""
    try:
        records = store.list_appraisals(property_id)
    except PersistenceError as e:
        logger.error("Failed to list appraisals: %s", e)
        return _error("Failed to fetch appraisals", 500)

    return JSONResponse({
        "success": True,
        "appraisals": [record.to_dict() for record in records],
    })
