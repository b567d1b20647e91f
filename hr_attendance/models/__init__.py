# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import (
    employee, attendance, leave_settings, advance, audit_log
)

# Explicit class exports for cleaner imports
from .employee import Employee, MonthlyLeave
from .attendance import Attendance, AttendanceRequest
from .leave_settings import LeaveSettings
from .advance import Advance
from .audit_log import AuditLog

__all__ = [
    "Employee",
    "MonthlyLeave",
    "Attendance",
    "AttendanceRequest",
    "LeaveSettings",
    "Advance",
    "AuditLog",
]
