"""
Reports Router

Read-only monthly reports: attendance grid, salary and leave balances.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hr_attendance.database import get_db
from hr_attendance.schemas.attendance import MonthlyAttendance
from hr_attendance.schemas.leave import LeaveReport
from hr_attendance.schemas.salary import SalaryReport
from hr_attendance.services import report_service


router = APIRouter(
    prefix="/reports",
    tags=["reports"]
)


@router.get("/attendance", response_model=MonthlyAttendance)
def attendance_report(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1900, le=9999),
    location: Optional[str] = None,
    db: Session = Depends(get_db)
):
    return report_service.monthly_attendance_report(db, month, year, location)


@router.get("/salary", response_model=SalaryReport)
def salary_report(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1900, le=9999),
    location: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """
    Salary for every active employee: gross from attendance, net after the
    advance recorded for the same month.
    """
    return report_service.salary_report(db, month, year, location)


@router.get("/leaves", response_model=LeaveReport)
def leave_report(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1900, le=9999),
    location: Optional[str] = None,
    db: Session = Depends(get_db)
):
    return report_service.leave_report(db, year, month, location)
