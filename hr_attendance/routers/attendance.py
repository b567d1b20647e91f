"""
Attendance Router

Bulk marking, status edits and the edit-request workflow.
All business logic is delegated to the attendance service layer.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from hr_attendance.core.schemas import ApiResponse
from hr_attendance.database import get_db
from hr_attendance.schemas.attendance import (
    AttendanceEditRequestCreate,
    AttendanceRecord,
    AttendanceRequestDecision,
    AttendanceRequestResponse,
    AttendanceStatusUpdate,
    BulkAttendanceRequest,
    RequestStatus,
)
from hr_attendance.services import attendance_service


router = APIRouter(
    prefix="/attendance",
    tags=["attendance"]
)


@router.get("", response_model=List[AttendanceRecord])
def list_attendance(
    location: Optional[str] = None,
    on_date: Optional[date] = Query(None, alias="date"),
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1900, le=9999),
    db: Session = Depends(get_db)
):
    """Records for one day (`date`) or a whole month (`month` + `year`)."""
    return attendance_service.list_attendance(db, location, on_date=on_date, month=month, year=year)


@router.post("/bulk", response_model=ApiResponse[List[AttendanceRecord]], status_code=status.HTTP_201_CREATED)
def mark_bulk_attendance(request: BulkAttendanceRequest, db: Session = Depends(get_db)):
    """
    Mark every active employee at a location for one day.

    Employees listed in `statuses` get the chosen status; the rest are marked
    present. The whole submission is rejected when any employee already has a
    record for the day or lacks the paid leave a selected status needs.
    """
    committed = attendance_service.mark_bulk_attendance(
        db, request.location, request.date, request.statuses
    )
    return ApiResponse.ok(
        committed,
        messages=[f"Attendance marked for {len(committed)} employee(s)"],
        metadata={"location": request.location, "date": request.date.isoformat()},
    )


@router.put("/{record_id}", response_model=AttendanceRecord)
def update_attendance(record_id: int, payload: AttendanceStatusUpdate, db: Session = Depends(get_db)):
    return attendance_service.update_attendance_status(db, record_id, payload.status)


@router.get("/requests", response_model=List[AttendanceRequestResponse])
def list_attendance_requests(
    status_filter: Optional[RequestStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db)
):
    return attendance_service.list_attendance_requests(db, status_filter)


@router.post("/requests", response_model=AttendanceRequestResponse, status_code=status.HTTP_201_CREATED)
def request_attendance_edit(payload: AttendanceEditRequestCreate, db: Session = Depends(get_db)):
    return attendance_service.request_attendance_edit(
        db, payload.attendance_id, payload.requested_status, payload.reason
    )


@router.put("/requests/{request_id}", response_model=AttendanceRequestResponse)
def resolve_attendance_request(
    request_id: int,
    decision: AttendanceRequestDecision,
    db: Session = Depends(get_db)
):
    """Approve (applying the requested status) or reject a pending request."""
    return attendance_service.resolve_attendance_request(db, request_id, decision.approve)
