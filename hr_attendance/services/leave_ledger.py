"""
Leave Ledger

Pure computations over an employee's monthly paid leave records:
resolving the record for a month, opening/closing balances, the gate that
decides whether a leave-consuming status may be selected, usage transitions
and the administrative reallocation that follows a policy change.

Nothing here touches the database; callers pass snapshots in and persist
whatever comes back.
"""

from datetime import date
from typing import Iterable, List, NamedTuple, Optional
import logging
import math

from hr_attendance.core.exceptions import ConfirmationRequiredError
from hr_attendance.schemas.attendance import AttendanceStatus
from hr_attendance.schemas.leave import (
    Employee,
    LeaveAnomaly,
    LeavePolicy,
    MonthlyLeaveRecord,
    PaidLeaves,
    ReallocatedEmployee,
    ReallocationResult,
)

logger = logging.getLogger(__name__)


class OpeningClosing(NamedTuple):
    opening: float
    closing: float


def monthly_allocation(policy: LeavePolicy) -> int:
    """Default monthly quota: the yearly allowance spread over 12 months, floored."""
    return policy.paid_leaves_per_year // 12


def compute_available(allocated: float, carried_forward: float, used: float) -> float:
    """
    Remaining balance. Negative carried-forward or used values are treated as
    zero here; `find_anomalies` is what reports them.
    """
    return max(allocated + max(carried_forward, 0.0) - max(used, 0.0), 0.0)


def find_anomalies(record: MonthlyLeaveRecord, employee_id: Optional[int] = None) -> List[LeaveAnomaly]:
    anomalies = []
    for field in ("carried_forward", "used"):
        value = getattr(record, field)
        if value < 0:
            anomalies.append(LeaveAnomaly(
                employee_id=employee_id,
                year=record.year,
                month=record.month,
                field=field,
                value=value,
            ))
    return anomalies


def default_record(year: int, month: int, policy: LeavePolicy) -> MonthlyLeaveRecord:
    allocated = float(monthly_allocation(policy))
    return MonthlyLeaveRecord(
        year=year,
        month=month,
        allocated=allocated,
        carried_forward=0.0,
        used=0.0,
        available=allocated,
    )


def resolve_monthly_record(
    employee: Employee,
    year: int,
    month: int,
    policy: LeavePolicy
) -> MonthlyLeaveRecord:
    """
    Return the employee's leave record for (year, month).

    An existing record is returned as a copy with `available` normalized to
    the ledger invariant. A missing one is synthesized from the policy's
    monthly allocation with nothing carried forward. The employee snapshot is
    never modified.
    """
    for record in employee.monthly_leaves:
        if record.year == year and record.month == month:
            anomalies = find_anomalies(record, employee.id)
            for anomaly in anomalies:
                logger.warning(
                    f"Negative {anomaly.field} ({anomaly.value}) for employee {employee.id} "
                    f"in {year}-{month:02d}; treating as 0"
                )
            return record.model_copy(update={
                "available": compute_available(record.allocated, record.carried_forward, record.used)
            })

    return default_record(year, month, policy)


def opening_closing(record: MonthlyLeaveRecord) -> OpeningClosing:
    """Opening and closing balances, to one decimal place."""
    opening = record.allocated + record.carried_forward
    closing = max(record.available, 0.0)
    return OpeningClosing(round(opening, 1), round(closing, 1))


def closing_balance(record: MonthlyLeaveRecord) -> float:
    return max(record.available, 0.0)


def required_deduction(status: AttendanceStatus, policy: LeavePolicy) -> float:
    """Leave days a status consumes from the monthly balance."""
    if status == AttendanceStatus.LEAVE:
        return 1.0
    if status == AttendanceStatus.HALF_DAY:
        return policy.half_day_deduction
    return 0.0


def leave_gate(record: MonthlyLeaveRecord, status: AttendanceStatus, policy: LeavePolicy) -> bool:
    """True when the closing balance covers what `status` would deduct."""
    required = required_deduction(status, policy)
    if required <= 0:
        return True
    return closing_balance(record) >= required


def apply_usage(record: MonthlyLeaveRecord, delta: float) -> MonthlyLeaveRecord:
    """
    Return a copy of `record` with `delta` leave days added to `used`
    (negative to give days back) and `available` recomputed.
    """
    used = record.used + delta
    if used < 0:
        logger.warning(
            f"Leave usage for {record.year}-{record.month:02d} would drop to {used}; clamping to 0"
        )
        used = 0.0
    return record.model_copy(update={
        "used": used,
        "available": compute_available(record.allocated, record.carried_forward, used),
    })


def paid_leaves_summary(record: MonthlyLeaveRecord) -> PaidLeaves:
    return PaidLeaves(
        available=closing_balance(record),
        used=record.used,
        carried_forward=record.carried_forward,
    )


def prorated_annual_allocation(join_date: Optional[date], policy: LeavePolicy, year: int) -> int:
    """
    Yearly entitlement for `year`. Someone who joined during that year gets the
    allowance for the remaining months only, counting the joining month, with
    halves rounded up. Any other year carries the full allowance.
    """
    if join_date is None or join_date.year != year:
        return policy.paid_leaves_per_year
    remaining_months = 12 - join_date.month + 1
    return int(math.floor(policy.paid_leaves_per_year * remaining_months / 12 + 0.5))


def _joined_by(join_date: Optional[date], year: int, month: int) -> bool:
    if join_date is None:
        return True
    return (join_date.year, join_date.month) <= (year, month)


def reallocate_for_policy_change(
    employees: Iterable[Employee],
    policy: LeavePolicy,
    effective_month: date,
    *,
    confirm: bool = False
) -> ReallocationResult:
    """
    Recompute `allocated` under a new policy for every active employee's
    records from `effective_month` through December of that year.

    Months before an employee's joining month get no allocation. `used` is
    kept as is and `available` is recomputed. Irreversible once persisted,
    hence the explicit `confirm` flag.

    Returns only the updated records; the caller persists them.
    """
    if not confirm:
        raise ConfirmationRequiredError("Leave reallocation")

    year, first_month = effective_month.year, effective_month.month
    per_month = monthly_allocation(policy)
    updated: List[ReallocatedEmployee] = []

    for employee in employees:
        if not employee.is_active:
            continue

        records: List[MonthlyLeaveRecord] = []
        for record in employee.monthly_leaves:
            if record.year != year or record.month < first_month:
                continue
            allocated = float(per_month) if _joined_by(employee.join_date, year, record.month) else 0.0
            records.append(record.model_copy(update={
                "allocated": allocated,
                "available": compute_available(allocated, record.carried_forward, record.used),
            }))

        updated.append(ReallocatedEmployee(
            employee_id=employee.id,
            annual_allocation=prorated_annual_allocation(employee.join_date, policy, year),
            records=records,
        ))

    result = ReallocationResult(
        effective_year=year,
        effective_month=first_month,
        monthly_allocation=per_month,
        employees=updated,
    )
    logger.info(
        f"Reallocated leaves from {year}-{first_month:02d}: "
        f"{len(updated)} employee(s), {result.records_updated} record(s)"
    )
    return result
