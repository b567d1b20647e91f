"""
Salary Calculator

Derives salary figures from a month of aggregated attendance:

    per_day_rate = salary / days_in_month
    gross        = per_day_rate * (present + half_day * (1 - half_day_deduction) + leave)
    net          = gross
    total        = net - advance

Absent and unrecorded days earn nothing. Values stay unrounded; the report
schemas round to two decimals when serialized.
"""

from calendar import monthrange
from typing import Dict, Iterable, List, Optional, Sequence

from hr_attendance.schemas.attendance import DayCounts, MonthlyAttendance
from hr_attendance.schemas.leave import Employee, LeavePolicy
from hr_attendance.schemas.salary import Advance, SalaryReport, SalaryReportLine, SalaryTotals


def days_in_month(year: int, month: int) -> int:
    return monthrange(year, month)[1]


def paid_days(counts: DayCounts, policy: LeavePolicy) -> float:
    return counts.present + counts.half_day * (1 - policy.half_day_deduction) + counts.leave


def compute_salary(
    employee: Employee,
    day_counts: DayCounts,
    policy: LeavePolicy,
    advance_for_month: float,
    *,
    year: int,
    month: int
) -> SalaryReportLine:
    days = days_in_month(year, month)
    per_day_rate = employee.salary / days
    gross = per_day_rate * paid_days(day_counts, policy)
    net = gross
    return SalaryReportLine(
        employee_id=employee.id,
        employee_code=employee.employee_code,
        name=employee.name,
        location=employee.location,
        month=month,
        year=year,
        days_in_month=days,
        present_days=day_counts.present,
        half_days=day_counts.half_day,
        absent_days=day_counts.absent,
        leave_days=day_counts.leave,
        unrecorded_days=day_counts.unrecorded,
        per_day_rate=per_day_rate,
        gross_salary=gross,
        net_salary=net,
        advance=advance_for_month,
        total_salary=net - advance_for_month,
    )


def _newest_first(advances: Iterable[Advance]) -> List[Advance]:
    # sorted() is stable, so among entries for the same period the one recorded last wins
    ordered = list(advances)
    ordered.reverse()
    return sorted(ordered, key=lambda a: (a.year, a.month), reverse=True)


def latest_advance(advances: Iterable[Advance]) -> Optional[Advance]:
    """The most recent advance by (year, month)."""
    ordered = _newest_first(advances)
    return ordered[0] if ordered else None


def resolve_advance(advances: Iterable[Advance], year: int, month: int) -> float:
    """Advance amount to deduct from the given month's salary, 0 when none was given."""
    for advance in _newest_first(advances):
        if advance.year == year and advance.month == month:
            return advance.amount
    return 0.0


def summarize(lines: Sequence[SalaryReportLine]) -> SalaryTotals:
    totals = SalaryTotals(
        employee_count=len(lines),
        unique_locations=len({line.location for line in lines}),
    )
    for line in lines:
        totals.present_days += line.present_days
        totals.half_days += line.half_days
        totals.absent_days += line.absent_days
        totals.leave_days += line.leave_days
        totals.unrecorded_days += line.unrecorded_days
        totals.gross_salary += line.gross_salary
        totals.net_salary += line.net_salary
        totals.advance += line.advance
        totals.total_salary += line.total_salary
    return totals


def build_salary_report(
    employees: Sequence[Employee],
    monthly: MonthlyAttendance,
    advances_by_employee: Dict[int, List[Advance]],
    policy: LeavePolicy,
    location: Optional[str] = None
) -> SalaryReport:
    lines = []
    for employee in employees:
        counts = monthly.per_employee.get(employee.id, DayCounts())
        advance = resolve_advance(advances_by_employee.get(employee.id, []), monthly.year, monthly.month)
        lines.append(compute_salary(
            employee, counts, policy, advance,
            year=monthly.year, month=monthly.month
        ))
    return SalaryReport(
        month=monthly.month,
        year=monthly.year,
        location=location,
        employees=lines,
        totals=summarize(lines),
    )
