"""
Employees Router

Roster, leave balances and salary advances. Business logic lives in the
employee service layer.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from hr_attendance.database import get_db
from hr_attendance.schemas.leave import Employee, PaidLeaves
from hr_attendance.schemas.salary import Advance, AdvanceUpdate
from hr_attendance.services import employee_service, settings_service
from pydantic import BaseModel


router = APIRouter(
    prefix="/employees",
    tags=["employees"]
)


class EmployeeLeaveBalance(BaseModel):
    employee_id: int
    employee_code: str
    name: str
    location: str
    year: int
    month: int
    paid_leaves: PaidLeaves


@router.get("", response_model=List[Employee])
def list_employees(
    location: Optional[str] = None,
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1900, le=9999),
    include_inactive: bool = False,
    db: Session = Depends(get_db)
):
    """
    Roster for a location (every location when omitted). `paid_leaves`
    summarizes the requested month, defaulting to the current one.
    """
    return employee_service.list_employees(
        db, location, month=month, year=year, include_inactive=include_inactive
    )


@router.get("/leaves", response_model=List[EmployeeLeaveBalance])
def list_leave_balances(
    location: Optional[str] = None,
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1900, le=9999),
    db: Session = Depends(get_db)
):
    today = date.today()
    month = month or today.month
    year = year or today.year
    policy = settings_service.get_leave_policy(db)
    employees = employee_service.list_employees(db, location, month=month, year=year, policy=policy)
    return [
        EmployeeLeaveBalance(
            employee_id=e.id,
            employee_code=e.employee_code,
            name=e.name,
            location=e.location,
            year=year,
            month=month,
            paid_leaves=e.paid_leaves,
        )
        for e in employees
    ]


@router.get("/{employee_id}/advances", response_model=List[Advance])
def list_advances(employee_id: int, db: Session = Depends(get_db)):
    return employee_service.list_advances(db, employee_id)


@router.put("/{employee_id}/advances", response_model=Advance)
def record_advance(employee_id: int, payload: AdvanceUpdate, db: Session = Depends(get_db)):
    """Set the salary advance for one month, replacing any earlier amount."""
    return employee_service.record_advance(
        db, employee_id, payload.year, payload.month, payload.amount
    )
