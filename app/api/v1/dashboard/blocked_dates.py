# ============================================================================
# FILE: app/api/v1/dashboard/blocked_dates.py
# Admin management of blocked dates - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session
from uuid import UUID

from app.config.database import get_db
from app.schemas.schedule import BlockDateRequest, BlockedDateUpdateRequest, BulkBlockDatesRequest
from app.services.blocked_date.date_exception_service import DateExceptionService

router = APIRouter(prefix="/blocked-dates")


@router.get("")
async def list_blocked_dates(
        active_only: bool = Query(False, description="Only dates that currently block bookings"),
        db: Session = Depends(get_db)
):
    records = DateExceptionService.list_blocked_dates(db, active_only=active_only)
    return {
        "success": True,
        "count": len(records),
        "blocked_dates": [record.to_dict() for record in records]
    }


@router.post("", status_code=201)
async def block_date(request: BlockDateRequest, db: Session = Depends(get_db)):
    """
    Block a full date, or only some of its slots.
    Returns 409 DUPLICATE_DATE if the date is already blocked.
    """
    record = DateExceptionService.create_block(
        db,
        request.date,
        reason=request.reason,
        blocked_time_slots=request.blocked_time_slots
    )
    return {"success": True, "message": "Date blocked successfully", "data": record.to_dict()}


@router.post("/bulk", status_code=201)
async def bulk_block_dates(request: BulkBlockDatesRequest, db: Session = Depends(get_db)):
    results = DateExceptionService.bulk_block(
        db,
        request.dates,
        reason=request.reason,
        blocked_time_slots=request.blocked_time_slots
    )
    return {
        "success": True,
        "message": f"{len(results['blocked'])} dates blocked",
        **results
    }


@router.get("/{exception_id}")
async def get_blocked_date(
        exception_id: UUID = Path(..., description="The blocked date ID"),
        db: Session = Depends(get_db)
):
    return {"success": True, "data": DateExceptionService.get(db, exception_id).to_dict()}


@router.patch("/{exception_id}/toggle")
async def toggle_blocked_date(
        exception_id: UUID = Path(..., description="The blocked date ID"),
        db: Session = Depends(get_db)
):
    """Switch a blocked date on or off without deleting it."""
    record = DateExceptionService.toggle_active(db, exception_id)
    state = "activated" if record.is_active else "deactivated"
    return {"success": True, "message": f"Blocked date {state}", "data": record.to_dict()}


@router.put("/{exception_id}")
async def update_blocked_date(
        request: BlockedDateUpdateRequest,
        exception_id: UUID = Path(..., description="The blocked date ID"),
        db: Session = Depends(get_db)
):
    record = DateExceptionService.update(
        db,
        exception_id,
        reason=request.reason,
        is_active=request.is_active,
        blocked_time_slots=request.blocked_time_slots
    )
    return {"success": True, "message": "Blocked date updated", "data": record.to_dict()}


@router.delete("/{exception_id}/slots/{slot}")
async def remove_blocked_slot(
        exception_id: UUID = Path(..., description="The blocked date ID"),
        slot: str = Path(..., description='Slot to unblock, e.g. "2:30"'),
        db: Session = Depends(get_db)
):
    record = DateExceptionService.remove_slot(db, exception_id, slot)
    return {"success": True, "message": f"Slot {slot} unblocked", "data": record.to_dict()}


@router.delete("/{exception_id}")
async def delete_blocked_date(
        exception_id: UUID = Path(..., description="The blocked date ID"),
        db: Session = Depends(get_db)
):
    DateExceptionService.delete(db, exception_id)
    return {"success": True, "message": "Blocked date removed"}
