"""
Report Service Layer

Monthly attendance, salary and leave reports. Each report is recomputed on
demand from stored attendance, employees, advances and the active policy;
nothing here is persisted.
"""

from typing import Optional
import logging

from sqlalchemy.orm import Session

from hr_attendance.schemas.attendance import MonthlyAttendance
from hr_attendance.schemas.leave import LeaveReport, LeaveSummaryLine, LeaveSummaryTotals
from hr_attendance.schemas.salary import SalaryReport
from hr_attendance.services import (
    attendance_service,
    employee_service,
    leave_ledger,
    monthly_aggregator,
    salary_calculator,
    settings_service,
)

logger = logging.getLogger(__name__)


def monthly_attendance_report(
    db: Session,
    month: int,
    year: int,
    location: Optional[str] = None
) -> MonthlyAttendance:
    """Attendance grid for a month: per-employee counts, per-day totals and month totals."""
    policy = settings_service.get_leave_policy(db)
    employees = employee_service.list_employees(db, location, month=month, year=year, policy=policy)
    records = attendance_service.list_attendance(db, location, month=month, year=year)
    return monthly_aggregator.aggregate(records, employees, month, year)


def salary_report(
    db: Session,
    month: int,
    year: int,
    location: Optional[str] = None
) -> SalaryReport:
    policy = settings_service.get_leave_policy(db)
    employees = employee_service.list_employees(db, location, month=month, year=year, policy=policy)
    # An employee's attendance counts even if it was marked at another location
    records = attendance_service.list_attendance(db, month=month, year=year)
    monthly = monthly_aggregator.aggregate(records, employees, month, year)
    advances = employee_service.advances_by_employee(db, [e.id for e in employees])
    report = salary_calculator.build_salary_report(employees, monthly, advances, policy, location)
    logger.info(f"Salary report {year}-{month:02d} ({location or 'all locations'}): {len(report.employees)} line(s)")
    return report


def leave_report(
    db: Session,
    year: int,
    month: int,
    location: Optional[str] = None
) -> LeaveReport:
    """Opening/closing balances per employee for a month, with stored-data anomalies."""
    policy = settings_service.get_leave_policy(db)
    employees = employee_service.list_employees(db, location, month=month, year=year, policy=policy)

    lines = []
    summary = LeaveSummaryTotals()
    for employee in employees:
        record = leave_ledger.resolve_monthly_record(employee, year, month, policy)
        stored = [r for r in employee.monthly_leaves if r.year == year and r.month == month]
        anomalies = leave_ledger.find_anomalies(stored[0], employee.id) if stored else []
        opening, closing = leave_ledger.opening_closing(record)
        lines.append(LeaveSummaryLine(
            employee_id=employee.id,
            employee_code=employee.employee_code,
            name=employee.name,
            location=employee.location,
            opening=opening,
            allocated=round(record.allocated, 1),
            carried_forward=round(record.carried_forward, 1),
            used=round(record.used, 1),
            closing=closing,
            anomalies=anomalies,
        ))
        summary.total_allocated += record.allocated
        summary.total_carried_forward += max(record.carried_forward, 0.0)
        summary.total_used += max(record.used, 0.0)
        summary.total_available += leave_ledger.closing_balance(record)

    return LeaveReport(year=year, month=month, employees=lines, summary=summary)
