"""
Monthly Aggregator

Folds a month of attendance into per-employee and per-day counts for the
attendance grid and salary input. Read-only reporting: a day without a record
counts as unrecorded, never as present.
"""

from calendar import monthrange
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
import logging

from hr_attendance.core.exceptions import DuplicateAttendanceError
from hr_attendance.schemas.attendance import (
    AttendanceRecord,
    AttendanceStatus,
    CalendarDay,
    DayCounts,
    MonthlyAttendance,
)
from hr_attendance.schemas.leave import Employee

logger = logging.getLogger(__name__)


def month_days(year: int, month: int) -> List[date]:
    first = date(year, month, 1)
    return [first + timedelta(days=offset) for offset in range(monthrange(year, month)[1])]


def calendar_days(year: int, month: int) -> List[CalendarDay]:
    # Sundays are flagged for display and still counted like any other day
    return [
        CalendarDay(date=day, day_name=day.strftime("%a"), is_sunday=day.weekday() == 6)
        for day in month_days(year, month)
    ]


def index_records(
    records: Iterable[AttendanceRecord],
    employee_ids: set,
    year: int,
    month: int
) -> Dict[Tuple[int, date], AttendanceRecord]:
    """
    Map (employee, day) to its record, keeping only employees and days in scope.

    Raises:
        DuplicateAttendanceError: two records exist for the same employee and day
    """
    index: Dict[Tuple[int, date], AttendanceRecord] = {}
    for record in records:
        if record.employee_id not in employee_ids:
            continue
        if record.date.year != year or record.date.month != month:
            continue
        key = (record.employee_id, record.date)
        if key in index:
            logger.warning(f"Duplicate attendance for employee {record.employee_id} on {record.date}")
            raise DuplicateAttendanceError(str(record.employee_id), record.date)
        index[key] = record
    return index


def aggregate(
    records: Iterable[AttendanceRecord],
    employees: Sequence[Employee],
    month: int,
    year: int
) -> MonthlyAttendance:
    """Count each employee's days by status, and each day's statuses across employees."""
    days = month_days(year, month)
    employee_ids = {emp.id for emp in employees}
    index = index_records(records, employee_ids, year, month)

    per_employee: Dict[int, DayCounts] = {emp.id: DayCounts() for emp in employees}
    per_day: Dict[date, DayCounts] = {day: DayCounts() for day in days}
    totals = DayCounts()
    grid: Dict[int, Dict[date, Optional[AttendanceStatus]]] = {emp.id: {} for emp in employees}

    for emp in employees:
        for day in days:
            record = index.get((emp.id, day))
            status = record.status if record else None
            per_employee[emp.id].add(status)
            per_day[day].add(status)
            totals.add(status)
            grid[emp.id][day] = status

    return MonthlyAttendance(
        month=month,
        year=year,
        days=calendar_days(year, month),
        per_employee=per_employee,
        per_day=per_day,
        totals=totals,
        grid=grid,
    )
