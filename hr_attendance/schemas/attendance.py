from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import Dict, List, Optional
import enum


class AttendanceStatus(str, enum.Enum):
    PRESENT = "present"
    ABSENT = "absent"
    HALF_DAY = "half-day"
    LEAVE = "leave"


class RequestStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AttendanceRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    employee_id: int
    date: date
    status: AttendanceStatus
    location: str


class LeaveViolation(BaseModel):
    employee_id: int
    status: AttendanceStatus
    required: float
    closing: float


class BatchResult(BaseModel):
    """Outcome of reconciling one bulk submission."""
    date: date
    location: str
    committed: List[AttendanceRecord] = Field(default_factory=list)
    conflicts: List[int] = Field(default_factory=list)
    leave_violations: List[LeaveViolation] = Field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return not self.conflicts and not self.leave_violations

    def status_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for record in self.committed:
            counts[record.status.value] = counts.get(record.status.value, 0) + 1
        return counts


class DayCounts(BaseModel):
    present: int = 0
    absent: int = 0
    half_day: int = 0
    leave: int = 0
    unrecorded: int = 0

    def add(self, status: Optional[AttendanceStatus]) -> None:
        if status is None:
            self.unrecorded += 1
        elif status == AttendanceStatus.PRESENT:
            self.present += 1
        elif status == AttendanceStatus.ABSENT:
            self.absent += 1
        elif status == AttendanceStatus.HALF_DAY:
            self.half_day += 1
        elif status == AttendanceStatus.LEAVE:
            self.leave += 1

    @property
    def recorded(self) -> int:
        return self.present + self.absent + self.half_day + self.leave

    @property
    def total(self) -> int:
        return self.recorded + self.unrecorded


class CalendarDay(BaseModel):
    date: date
    day_name: str
    is_sunday: bool


class MonthlyAttendance(BaseModel):
    month: int
    year: int
    days: List[CalendarDay]
    per_employee: Dict[int, DayCounts]
    per_day: Dict[date, DayCounts]
    totals: DayCounts
    # employee id -> day -> status (None when unrecorded)
    grid: Dict[int, Dict[date, Optional[AttendanceStatus]]]


# --- API payloads ---

class BulkAttendanceRequest(BaseModel):
    location: str = Field(..., min_length=1)
    date: date
    # Only the employees an operator explicitly selected; everyone else is marked present
    statuses: Dict[int, AttendanceStatus] = Field(default_factory=dict)


class AttendanceStatusUpdate(BaseModel):
    status: AttendanceStatus


class AttendanceEditRequestCreate(BaseModel):
    attendance_id: int
    requested_status: AttendanceStatus
    reason: Optional[str] = None


class AttendanceRequestDecision(BaseModel):
    approve: bool


class AttendanceRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    attendance_id: int
    requested_status: AttendanceStatus
    current_status: Optional[AttendanceStatus] = None
    reason: Optional[str] = None
    status: RequestStatus
    created_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
