"""
Attendance Service Layer

Attendance store operations: listing, bulk marking through the reconciler,
status edits and the edit-request workflow. Leave-consuming statuses adjust
the employee's monthly leave record in the same transaction as the
attendance change.

Architecture:
- Router -> Service (this module) -> Models / engine modules
- The reconciler decides what to write; this module fetches its inputs,
  maps its verdicts to errors and persists the batch
"""

from datetime import date, datetime, timezone
from typing import Dict, List, Optional
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hr_attendance.core.exceptions import (
    AttendanceConflictError,
    EmptyRosterError,
    InsufficientLeaveError,
    NotFoundError,
    RequestAlreadyResolvedError,
)
from hr_attendance.models.attendance import Attendance, AttendanceRequest
from hr_attendance.schemas.attendance import (
    AttendanceRecord,
    AttendanceRequestResponse,
    AttendanceStatus,
    BatchResult,
    RequestStatus,
)
from hr_attendance.schemas.leave import LeavePolicy, MonthlyLeaveRecord
from hr_attendance.services import attendance_reconciler, employee_service, leave_ledger, settings_service
from hr_attendance.services.audit import AuditService
from hr_attendance.services.monthly_aggregator import month_days

logger = logging.getLogger(__name__)


def list_attendance(
    db: Session,
    location: Optional[str] = None,
    on_date: Optional[date] = None,
    month: Optional[int] = None,
    year: Optional[int] = None
) -> List[AttendanceRecord]:
    """Attendance for a single day, or for a whole month when `month` and `year` are given."""
    query = db.query(Attendance)
    if location:
        query = query.filter(Attendance.location == location)
    if on_date is not None:
        query = query.filter(Attendance.date == on_date)
    elif month is not None and year is not None:
        days = month_days(year, month)
        query = query.filter(Attendance.date >= days[0], Attendance.date <= days[-1])
    rows = query.order_by(Attendance.date, Attendance.employee_id).all()
    return [AttendanceRecord.model_validate(r) for r in rows]


def _apply_leave_delta(
    db: Session,
    employee_id: int,
    year: int,
    month: int,
    delta: float,
    policy: LeavePolicy
) -> None:
    if delta == 0:
        return
    employee = employee_service.get_employee_row(db, employee_id)
    stored = employee_service.get_or_create_monthly_leave(db, employee, year, month, policy)
    updated = leave_ledger.apply_usage(MonthlyLeaveRecord.model_validate(stored), delta)
    stored.used = updated.used
    stored.available = updated.available


def commit_attendance_batch(db: Session, batch: BatchResult, policy: LeavePolicy) -> List[AttendanceRecord]:
    """
    Persist an accepted batch and consume leave for leave-type statuses.

    Raises:
        AttendanceConflictError: the store already holds a record for one of the
            employees on that day (a concurrent submission won the race)
    """
    rows = [
        Attendance(
            employee_id=r.employee_id,
            date=r.date,
            status=r.status.value,
            location=r.location,
        )
        for r in batch.committed
    ]
    try:
        db.add_all(rows)
        db.flush()
        for employee_id, deduction in attendance_reconciler.leave_deductions(batch.committed, policy).items():
            _apply_leave_delta(db, employee_id, batch.date.year, batch.date.month, deduction, policy)
        AuditService.log(
            db,
            action="bulk_mark_attendance",
            entity_type="attendance",
            entity_id=None,
            details={
                "location": batch.location,
                "date": batch.date,
                "counts": batch.status_counts(),
            },
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        taken = [
            r.employee_id for r in db.query(Attendance.employee_id).filter(
                Attendance.date == batch.date,
                Attendance.employee_id.in_([rec.employee_id for rec in batch.committed]),
            )
        ]
        raise AttendanceConflictError(taken, batch.date)
    except Exception:
        db.rollback()
        raise

    for row in rows:
        db.refresh(row)
    return [AttendanceRecord.model_validate(r) for r in rows]


def mark_bulk_attendance(
    db: Session,
    location: str,
    on_date: date,
    explicit_statuses: Dict[int, AttendanceStatus]
) -> List[AttendanceRecord]:
    """
    Mark a whole location for a day: selected employees get their chosen
    status, everyone else is marked present.
    """
    policy = settings_service.get_leave_policy(db)
    roster = employee_service.list_employees(
        db, location, month=on_date.month, year=on_date.year, policy=policy
    )
    if not roster:
        raise EmptyRosterError(location)

    existing = list_attendance(db, on_date=on_date)
    batch = attendance_reconciler.build_batch(
        roster, explicit_statuses, on_date, location, existing, policy
    )
    if batch.conflicts:
        raise AttendanceConflictError(batch.conflicts, on_date)
    if batch.leave_violations:
        raise InsufficientLeaveError([v.model_dump(mode="json") for v in batch.leave_violations])

    committed = commit_attendance_batch(db, batch, policy)
    logger.info(
        f"Marked attendance for {len(committed)} employee(s) at {location} on {on_date}: "
        f"{batch.status_counts()}"
    )
    return committed


def get_attendance_row(db: Session, record_id: int) -> Attendance:
    row = db.query(Attendance).filter(Attendance.id == record_id).first()
    if not row:
        raise NotFoundError("Attendance record", record_id)
    return row


def _change_status(db: Session, row: Attendance, new_status: AttendanceStatus, policy: LeavePolicy) -> None:
    """
    Swap a record's status, giving back the old status's leave deduction and
    charging the new one. Not committed.
    """
    old_status = AttendanceStatus(row.status)
    if old_status == new_status:
        return

    refund = leave_ledger.required_deduction(old_status, policy)
    charge = leave_ledger.required_deduction(new_status, policy)

    if charge > 0:
        employee = employee_service.get_employee_row(db, row.employee_id)
        stored = employee_service.get_or_create_monthly_leave(
            db, employee, row.date.year, row.date.month, policy
        )
        restored = leave_ledger.apply_usage(MonthlyLeaveRecord.model_validate(stored), -refund)
        if not leave_ledger.leave_gate(restored, new_status, policy):
            raise InsufficientLeaveError([{
                "employee_id": row.employee_id,
                "status": new_status.value,
                "required": charge,
                "closing": leave_ledger.closing_balance(restored),
            }])

    _apply_leave_delta(db, row.employee_id, row.date.year, row.date.month, charge - refund, policy)
    row.status = new_status.value


def update_attendance_status(db: Session, record_id: int, new_status: AttendanceStatus) -> AttendanceRecord:
    policy = settings_service.get_leave_policy(db)
    row = get_attendance_row(db, record_id)
    before = AttendanceRecord.model_validate(row)

    _change_status(db, row, new_status, policy)
    AuditService.log(
        db,
        action="update_attendance_status",
        entity_type="attendance",
        entity_id=row.id,
        details={"employee_id": row.employee_id, "date": row.date},
        before_state={"status": before.status},
        after_state={"status": new_status},
    )
    try:
        db.commit()
        db.refresh(row)
    except Exception:
        db.rollback()
        raise
    return AttendanceRecord.model_validate(row)


def _request_to_response(req: AttendanceRequest) -> AttendanceRequestResponse:
    response = AttendanceRequestResponse.model_validate(req)
    if req.attendance is not None:
        response.current_status = AttendanceStatus(req.attendance.status)
    return response


def request_attendance_edit(
    db: Session,
    record_id: int,
    requested_status: AttendanceStatus,
    reason: Optional[str] = None
) -> AttendanceRequestResponse:
    get_attendance_row(db, record_id)
    req = AttendanceRequest(
        attendance_id=record_id,
        requested_status=requested_status.value,
        reason=reason,
        status=RequestStatus.PENDING.value,
    )
    db.add(req)
    try:
        db.commit()
        db.refresh(req)
    except Exception:
        db.rollback()
        raise
    return _request_to_response(req)


def list_attendance_requests(db: Session, status: Optional[RequestStatus] = None) -> List[AttendanceRequestResponse]:
    query = db.query(AttendanceRequest)
    if status:
        query = query.filter(AttendanceRequest.status == status.value)
    return [_request_to_response(r) for r in query.order_by(AttendanceRequest.created_at.desc(), AttendanceRequest.id.desc()).all()]


def resolve_attendance_request(db: Session, request_id: int, approve: bool) -> AttendanceRequestResponse:
    """Approve (applying the requested status) or reject a pending edit request."""
    req = db.query(AttendanceRequest).filter(AttendanceRequest.id == request_id).first()
    if not req:
        raise NotFoundError("Attendance request", request_id)
    if req.status != RequestStatus.PENDING.value:
        raise RequestAlreadyResolvedError(request_id, req.status)

    if approve:
        policy = settings_service.get_leave_policy(db)
        _change_status(db, req.attendance, AttendanceStatus(req.requested_status), policy)
        req.status = RequestStatus.APPROVED.value
    else:
        req.status = RequestStatus.REJECTED.value
    req.resolved_at = datetime.now(timezone.utc)

    AuditService.log(
        db,
        action="approve_attendance_request" if approve else "reject_attendance_request",
        entity_type="attendance_request",
        entity_id=req.id,
        details={"attendance_id": req.attendance_id, "requested_status": req.requested_status},
    )
    try:
        db.commit()
        db.refresh(req)
    except Exception:
        db.rollback()
        raise
    return _request_to_response(req)
