"""
Employee Service Layer

Roster and advance provider. Converts stored employees into the snapshots the
leave/attendance engine works on, and persists lazily created monthly leave
records when a month sees its first leave usage.
"""

from datetime import date
from typing import List, Optional
import logging

from sqlalchemy.orm import Session, selectinload

from hr_attendance.core.exceptions import NotFoundError
from hr_attendance.models.advance import Advance as AdvanceModel
from hr_attendance.models.employee import Employee as EmployeeModel, MonthlyLeave
from hr_attendance.schemas.leave import Employee, LeavePolicy, MonthlyLeaveRecord
from hr_attendance.schemas.salary import Advance
from hr_attendance.services import leave_ledger
from hr_attendance.services.audit import AuditService

logger = logging.getLogger(__name__)


def to_snapshot(
    row: EmployeeModel,
    policy: Optional[LeavePolicy] = None,
    year: Optional[int] = None,
    month: Optional[int] = None
) -> Employee:
    """
    Build the engine's view of an employee. With a policy, `paid_leaves`
    summarizes the requested month (today's month by default).
    """
    snapshot = Employee.model_validate(row)
    if policy is not None:
        today = date.today()
        record = leave_ledger.resolve_monthly_record(
            snapshot, year or today.year, month or today.month, policy
        )
        snapshot.paid_leaves = leave_ledger.paid_leaves_summary(record)
    return snapshot


def list_employees(
    db: Session,
    location: Optional[str] = None,
    month: Optional[int] = None,
    year: Optional[int] = None,
    policy: Optional[LeavePolicy] = None,
    include_inactive: bool = False
) -> List[Employee]:
    """
    Roster for a location (all locations when omitted), ordered by employee code,
    each with its monthly leave history.
    """
    if policy is None:
        from hr_attendance.services import settings_service
        policy = settings_service.get_leave_policy(db)

    query = db.query(EmployeeModel).options(selectinload(EmployeeModel.monthly_leaves))
    if location:
        query = query.filter(EmployeeModel.location == location)
    if not include_inactive:
        query = query.filter(EmployeeModel.is_active.is_(True))
    rows = query.order_by(EmployeeModel.employee_code).all()
    return [to_snapshot(row, policy, year, month) for row in rows]


def get_employee_row(db: Session, employee_id: int) -> EmployeeModel:
    row = db.query(EmployeeModel).filter(EmployeeModel.id == employee_id).first()
    if not row:
        raise NotFoundError("Employee", employee_id)
    return row


def get_employee(db: Session, employee_id: int, policy: Optional[LeavePolicy] = None) -> Employee:
    return to_snapshot(get_employee_row(db, employee_id), policy)


def create_employee(
    db: Session,
    employee_code: str,
    name: str,
    location: str,
    salary: float = 0.0,
    department: Optional[str] = None,
    designation: Optional[str] = None,
    join_date: Optional[date] = None,
    monthly_leaves: Optional[List[MonthlyLeaveRecord]] = None
) -> EmployeeModel:
    row = EmployeeModel(
        employee_code=employee_code,
        name=name,
        location=location,
        salary=salary,
        department=department,
        designation=designation,
        join_date=join_date,
    )
    for record in monthly_leaves or []:
        row.monthly_leaves.append(MonthlyLeave(**record.model_dump()))
    db.add(row)
    try:
        db.commit()
        db.refresh(row)
    except Exception:
        db.rollback()
        raise
    return row


def get_or_create_monthly_leave(
    db: Session,
    employee: EmployeeModel,
    year: int,
    month: int,
    policy: LeavePolicy
) -> MonthlyLeave:
    """Stored leave row for the month, created from the policy default when missing. Not committed."""
    for stored in employee.monthly_leaves:
        if stored.year == year and stored.month == month:
            return stored
    record = leave_ledger.default_record(year, month, policy)
    stored = MonthlyLeave(**record.model_dump())
    employee.monthly_leaves.append(stored)
    db.flush()
    return stored


def list_advances(db: Session, employee_id: int) -> List[Advance]:
    get_employee_row(db, employee_id)
    rows = (
        db.query(AdvanceModel)
        .filter(AdvanceModel.employee_id == employee_id)
        .order_by(AdvanceModel.year.desc(), AdvanceModel.month.desc(), AdvanceModel.id.desc())
        .all()
    )
    return [Advance.model_validate(r) for r in rows]


def advances_by_employee(db: Session, employee_ids: List[int]) -> dict:
    grouped = {emp_id: [] for emp_id in employee_ids}
    if not employee_ids:
        return grouped
    rows = (
        db.query(AdvanceModel)
        .filter(AdvanceModel.employee_id.in_(employee_ids))
        .order_by(AdvanceModel.id)
        .all()
    )
    for r in rows:
        grouped[r.employee_id].append(Advance.model_validate(r))
    return grouped


def record_advance(db: Session, employee_id: int, year: int, month: int, amount: float) -> Advance:
    """Set the advance for a month, replacing any amount already recorded for it."""
    get_employee_row(db, employee_id)
    row = db.query(AdvanceModel).filter(
        AdvanceModel.employee_id == employee_id,
        AdvanceModel.year == year,
        AdvanceModel.month == month,
    ).first()
    before = Advance.model_validate(row) if row else None
    if row is None:
        row = AdvanceModel(employee_id=employee_id, year=year, month=month, amount=amount)
        db.add(row)
    else:
        row.amount = amount

    AuditService.log(
        db,
        action="record_advance",
        entity_type="advance",
        entity_id=employee_id,
        details={"year": year, "month": month},
        before_state=before,
        after_state={"amount": amount},
    )
    try:
        db.commit()
        db.refresh(row)
    except Exception:
        db.rollback()
        raise
    return Advance.model_validate(row)
