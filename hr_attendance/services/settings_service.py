"""
Leave Policy Service

Policy provider backed by the single-row `leave_settings` table, plus the
explicitly confirmed reallocation of monthly leave quotas across the roster.
"""

from datetime import date
import logging

from sqlalchemy.orm import Session

from hr_attendance.core.config import settings
from hr_attendance.core.exceptions import InvalidPolicyError
from hr_attendance.models.employee import Employee as EmployeeModel, MonthlyLeave
from hr_attendance.models.leave_settings import LeaveSettings
from hr_attendance.schemas.leave import LeavePolicy, LeavePolicyUpdate, ReallocationResult
from hr_attendance.services import leave_ledger
from hr_attendance.services.audit import AuditService

logger = logging.getLogger(__name__)


def _get_or_create_row(db: Session) -> LeaveSettings:
    row = db.query(LeaveSettings).order_by(LeaveSettings.id).first()
    if row is None:
        defaults = settings.leave_defaults
        row = LeaveSettings(
            paid_leaves_per_year=defaults.paid_leaves_per_year,
            half_day_deduction=defaults.half_day_deduction,
            highlight_duration_hours=defaults.highlight_duration_hours,
        )
        db.add(row)
        try:
            db.commit()
            db.refresh(row)
        except Exception:
            db.rollback()
            raise
        logger.info("Seeded leave policy from configuration defaults")
    return row


def get_leave_policy(db: Session) -> LeavePolicy:
    return LeavePolicy.model_validate(_get_or_create_row(db))


def update_leave_policy(db: Session, partial: LeavePolicyUpdate) -> LeavePolicy:
    """
    Apply a partial policy update. Existing monthly records are left alone;
    re-applying balances is the separate `reallocate_leaves` step.
    """
    changes = partial.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise InvalidPolicyError("No policy fields supplied")

    row = _get_or_create_row(db)
    before = LeavePolicy.model_validate(row)
    merged = before.model_dump()
    merged.update(changes)
    try:
        updated = LeavePolicy(**merged)
    except ValueError as e:
        raise InvalidPolicyError(str(e))

    row.paid_leaves_per_year = updated.paid_leaves_per_year
    row.half_day_deduction = updated.half_day_deduction
    row.highlight_duration_hours = updated.highlight_duration_hours

    AuditService.log(
        db,
        action="update_leave_policy",
        entity_type="leave_settings",
        entity_id=row.id,
        details={"fields": sorted(changes)},
        before_state=before,
        after_state=updated,
    )
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"Leave policy updated: {changes}")
    return updated


def reallocate_leaves(db: Session, effective_month: date, confirm: bool = False) -> ReallocationResult:
    """
    Re-apply the current policy to every active employee's monthly records
    from `effective_month` onward. Requires `confirm=True`; not reversible.
    """
    from hr_attendance.services import employee_service

    policy = get_leave_policy(db)
    rows = (
        db.query(EmployeeModel)
        .filter(EmployeeModel.is_active.is_(True))
        .order_by(EmployeeModel.id)
        .all()
    )
    snapshots = [employee_service.to_snapshot(row) for row in rows]

    # Raises ConfirmationRequiredError before anything is written
    result = leave_ledger.reallocate_for_policy_change(
        snapshots, policy, effective_month, confirm=confirm
    )

    for entry in result.employees:
        for record in entry.records:
            stored = db.query(MonthlyLeave).filter(
                MonthlyLeave.employee_id == entry.employee_id,
                MonthlyLeave.year == record.year,
                MonthlyLeave.month == record.month,
            ).first()
            if stored is None:
                continue
            stored.allocated = record.allocated
            stored.available = record.available

    AuditService.log(
        db,
        action="reallocate_leaves",
        entity_type="monthly_leaves",
        entity_id=None,
        details={
            "effective": f"{result.effective_year}-{result.effective_month:02d}",
            "employees": len(result.employees),
            "records": result.records_updated,
        },
        after_state=policy,
    )
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    return result
