"""
Attendance Reconciler

Turns a bulk marking submission into a complete batch of attendance records
for one location and day.

Rules:
- Employees the operator selected get the status chosen for them.
- Every other roster member is recorded as present. Silence means
  attendance, not absence.
- If anyone on the roster already has a record for the day, the whole batch
  is rejected and the conflicting employees are reported. Nothing is
  partially committed.
- Leave-consuming statuses must pass the leave ledger's gate for the month
  of the submission.

The result is a pure function of its inputs: calling it twice with the same
roster, selections and existing records yields the same batch.
"""

from datetime import date
from typing import Dict, Iterable, List, Mapping, Sequence
import logging

from hr_attendance.core.exceptions import UnknownEmployeeError
from hr_attendance.schemas.attendance import (
    AttendanceRecord,
    AttendanceStatus,
    BatchResult,
    LeaveViolation,
)
from hr_attendance.schemas.leave import Employee, LeavePolicy
from hr_attendance.services import leave_ledger

logger = logging.getLogger(__name__)

DEFAULT_STATUS = AttendanceStatus.PRESENT


def find_conflicts(
    roster: Sequence[Employee],
    on_date: date,
    existing: Iterable[AttendanceRecord]
) -> List[int]:
    """Roster employee ids that already have a record for `on_date`, in roster order."""
    marked = {r.employee_id for r in existing if r.date == on_date}
    return [emp.id for emp in roster if emp.id in marked]


def check_leave_gate(
    employee: Employee,
    status: AttendanceStatus,
    on_date: date,
    policy: LeavePolicy
) -> List[LeaveViolation]:
    required = leave_ledger.required_deduction(status, policy)
    if required <= 0:
        return []
    record = leave_ledger.resolve_monthly_record(employee, on_date.year, on_date.month, policy)
    if leave_ledger.leave_gate(record, status, policy):
        return []
    return [LeaveViolation(
        employee_id=employee.id,
        status=status,
        required=required,
        closing=leave_ledger.closing_balance(record),
    )]


def build_batch(
    roster: Sequence[Employee],
    explicit_statuses: Mapping[int, AttendanceStatus],
    on_date: date,
    location: str,
    existing: Iterable[AttendanceRecord],
    policy: LeavePolicy
) -> BatchResult:
    """
    Reconcile a bulk submission against existing attendance and leave balances.

    Args:
        roster: All employees at `location`
        explicit_statuses: Employee id -> status, only for selected employees
        on_date: Day being marked
        location: Location every record is stamped with
        existing: Attendance already recorded (records for other days are ignored)
        policy: Active leave policy used by the leave gate

    Returns:
        BatchResult whose `committed` list is empty unless the batch is
        accepted, i.e. has no conflicts and no leave violations.

    Raises:
        UnknownEmployeeError: a selection names someone who is not on the roster
    """
    roster_ids = {emp.id for emp in roster}
    unknown = [str(emp_id) for emp_id in explicit_statuses if emp_id not in roster_ids]
    if unknown:
        raise UnknownEmployeeError(unknown, location)

    conflicts = find_conflicts(roster, on_date, existing)
    conflicting = set(conflicts)

    records: List[AttendanceRecord] = []
    violations: List[LeaveViolation] = []

    for employee in roster:
        if employee.id in conflicting:
            continue
        status = explicit_statuses.get(employee.id, DEFAULT_STATUS)
        violations.extend(check_leave_gate(employee, status, on_date, policy))
        records.append(AttendanceRecord(
            employee_id=employee.id,
            date=on_date,
            status=status,
            location=location,
        ))

    if conflicts:
        logger.warning(
            f"Bulk attendance for {location} on {on_date} rejected: "
            f"{len(conflicts)} employee(s) already marked"
        )
        records = []
    if violations:
        logger.warning(
            f"Bulk attendance for {location} on {on_date} rejected: "
            f"{len(violations)} employee(s) lack paid leave balance"
        )
        records = []

    return BatchResult(
        date=on_date,
        location=location,
        committed=records,
        conflicts=conflicts,
        leave_violations=violations,
    )


def leave_deductions(records: Iterable[AttendanceRecord], policy: LeavePolicy) -> Dict[int, float]:
    """Leave days each employee's record consumes, for the store to apply on commit."""
    deductions: Dict[int, float] = {}
    for record in records:
        amount = leave_ledger.required_deduction(record.status, policy)
        if amount > 0:
            deductions[record.employee_id] = deductions.get(record.employee_id, 0.0) + amount
    return deductions
