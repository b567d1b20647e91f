"""
Settings Router

Leave policy management and the confirmed reallocation of monthly quotas.
"""

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hr_attendance.core.schemas import ApiResponse
from hr_attendance.database import get_db
from hr_attendance.schemas.leave import (
    LeavePolicy,
    LeavePolicyUpdate,
    ReallocationRequest,
    ReallocationResult,
)
from hr_attendance.services import settings_service


router = APIRouter(
    prefix="/settings",
    tags=["settings"]
)


@router.get("", response_model=LeavePolicy)
def get_settings(db: Session = Depends(get_db)):
    return settings_service.get_leave_policy(db)


@router.put("", response_model=ApiResponse[LeavePolicy])
def update_settings(payload: LeavePolicyUpdate, db: Session = Depends(get_db)):
    """
    Partially update the leave policy. Existing monthly records keep their
    allocation until `/settings/reallocate-leaves` is run.
    """
    policy = settings_service.update_leave_policy(db, payload)
    return ApiResponse.ok(
        policy,
        messages=["Leave policy updated. Run a reallocation to apply it to existing monthly records."],
    )


@router.post("/reallocate-leaves", response_model=ApiResponse[ReallocationResult])
def reallocate_leaves(request: ReallocationRequest, db: Session = Depends(get_db)):
    result = settings_service.reallocate_leaves(
        db, date(request.effective_year, request.effective_month, 1), confirm=request.confirm
    )
    return ApiResponse.ok(
        result,
        messages=[f"Reallocated {result.records_updated} monthly record(s) for {len(result.employees)} employee(s)"],
    )
