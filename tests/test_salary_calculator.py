import pytest

from hr_attendance.schemas.attendance import AttendanceRecord, AttendanceStatus, DayCounts
from hr_attendance.schemas.leave import LeavePolicy
from hr_attendance.schemas.salary import Advance
from hr_attendance.services import monthly_aggregator, salary_calculator


def _advance(year, month, amount, emp_id=1):
    return Advance(employee_id=emp_id, year=year, month=month, amount=amount)


def test_days_in_month():
    assert salary_calculator.days_in_month(2025, 6) == 30
    assert salary_calculator.days_in_month(2025, 7) == 31
    assert salary_calculator.days_in_month(2024, 2) == 29


def test_full_attendance_earns_full_salary(make_employee, policy):
    counts = DayCounts(present=31)
    line = salary_calculator.compute_salary(make_employee(salary=31000), counts, policy, 0, year=2025, month=7)
    assert line.per_day_rate == 1000
    assert line.gross_salary == 31000
    assert line.total_salary == 31000


def test_half_days_are_paid_after_the_deduction(make_employee):
    policy = LeavePolicy(paid_leaves_per_year=24, half_day_deduction=0.25)
    counts = DayCounts(present=10, half_day=4, unrecorded=16)
    line = salary_calculator.compute_salary(make_employee(salary=30000), counts, policy, 0, year=2025, month=6)
    assert line.gross_salary == pytest.approx(1000 * (10 + 4 * 0.75))


def test_absent_and_unrecorded_days_earn_nothing(make_employee, policy):
    counts = DayCounts(absent=10, unrecorded=20)
    line = salary_calculator.compute_salary(make_employee(), counts, policy, 500, year=2025, month=6)
    assert line.gross_salary == 0
    assert line.total_salary == -500


def test_money_is_rounded_only_when_serialized(make_employee, policy):
    counts = DayCounts(present=1, unrecorded=29)
    line = salary_calculator.compute_salary(make_employee(salary=10000), counts, policy, 0, year=2025, month=6)
    assert line.gross_salary == pytest.approx(333.3333333)
    assert line.model_dump()["gross_salary"] == 333.33


def test_advance_applies_only_to_its_month():
    advances = [_advance(2025, 5, 1000), _advance(2025, 6, 2000), _advance(2025, 7, 3000)]
    assert salary_calculator.resolve_advance(advances, 2025, 6) == 2000
    assert salary_calculator.resolve_advance(advances, 2024, 6) == 0
    assert salary_calculator.resolve_advance([], 2025, 6) == 0


def test_last_recorded_advance_wins_for_a_month():
    advances = [_advance(2025, 6, 2000), _advance(2025, 6, 2500)]
    assert salary_calculator.resolve_advance(advances, 2025, 6) == 2500


def test_latest_advance_orders_by_period():
    advances = [_advance(2025, 7, 3000), _advance(2024, 12, 100), _advance(2025, 2, 700)]
    assert salary_calculator.latest_advance(advances).amount == 3000
    assert salary_calculator.latest_advance([]) is None


def test_month_of_attendance_to_salary_report(make_employee, policy):
    """30-day month: 25 present, 2 half days, 2 absent, 1 leave, 2000 advance."""
    employee = make_employee(salary=30000)
    days = monthly_aggregator.month_days(2025, 6)
    statuses = (
        [AttendanceStatus.PRESENT] * 25
        + [AttendanceStatus.HALF_DAY] * 2
        + [AttendanceStatus.ABSENT] * 2
        + [AttendanceStatus.LEAVE]
    )
    records = [
        AttendanceRecord(employee_id=employee.id, date=day, status=status, location="Mumbai")
        for day, status in zip(days, statuses)
    ]
    monthly = monthly_aggregator.aggregate(records, [employee], 6, 2025)
    report = salary_calculator.build_salary_report(
        [employee], monthly, {employee.id: [_advance(2025, 6, 2000)]}, policy, "Mumbai"
    )

    line = report.employees[0]
    assert (line.present_days, line.half_days, line.absent_days, line.leave_days) == (25, 2, 2, 1)
    assert line.unrecorded_days == 0
    assert line.per_day_rate == 1000
    assert line.gross_salary == pytest.approx(27000)
    assert line.net_salary == pytest.approx(27000)
    assert line.advance == 2000
    assert line.total_salary == pytest.approx(25000)
    assert report.totals.employee_count == 1
    assert report.totals.total_salary == pytest.approx(25000)


def test_summary_totals(make_employee, policy):
    lines = [
        salary_calculator.compute_salary(
            make_employee(emp_id=1, location="Mumbai"), DayCounts(present=30), policy, 1000, year=2025, month=6
        ),
        salary_calculator.compute_salary(
            make_employee(emp_id=2, location="Pune", salary=15000), DayCounts(present=30), policy, 0, year=2025, month=6
        ),
    ]
    totals = salary_calculator.summarize(lines)
    assert totals.employee_count == 2
    assert totals.unique_locations == 2
    assert totals.present_days == 60
    assert totals.gross_salary == pytest.approx(45000)
    assert totals.advance == 1000
    assert totals.total_salary == pytest.approx(44000)
