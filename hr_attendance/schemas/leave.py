from pydantic import BaseModel, ConfigDict, Field
from datetime import date
from typing import List, Optional


class LeavePolicy(BaseModel):
    """Organization-wide leave configuration."""
    model_config = ConfigDict(from_attributes=True)

    paid_leaves_per_year: int = Field(..., ge=0, le=366)
    half_day_deduction: float = Field(..., ge=0, le=1)
    # Presentation only; the engine never reads it
    highlight_duration_hours: int = Field(24, ge=0)


class LeavePolicyUpdate(BaseModel):
    paid_leaves_per_year: Optional[int] = Field(None, ge=0, le=366)
    half_day_deduction: Optional[float] = Field(None, ge=0, le=1)
    highlight_duration_hours: Optional[int] = Field(None, ge=0)


class MonthlyLeaveRecord(BaseModel):
    """One employee's paid leave quota for one calendar month."""
    model_config = ConfigDict(from_attributes=True)

    year: int
    month: int = Field(..., ge=1, le=12)
    allocated: float = 0.0
    carried_forward: float = 0.0
    used: float = 0.0
    available: float = 0.0


class PaidLeaves(BaseModel):
    available: float = 0.0
    used: float = 0.0
    carried_forward: float = 0.0


class Employee(BaseModel):
    """Roster snapshot handed to the engine."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_code: str
    name: str
    location: str
    department: Optional[str] = None
    designation: Optional[str] = None
    salary: float = 0.0
    join_date: Optional[date] = None
    is_active: bool = True
    paid_leaves: PaidLeaves = Field(default_factory=PaidLeaves)
    monthly_leaves: List[MonthlyLeaveRecord] = Field(default_factory=list)


class LeaveAnomaly(BaseModel):
    """Negative value found in stored leave data. Reported, never repaired."""
    employee_id: Optional[int] = None
    year: int
    month: int
    field: str
    value: float


class ReallocatedEmployee(BaseModel):
    employee_id: int
    annual_allocation: int
    records: List[MonthlyLeaveRecord]


class ReallocationRequest(BaseModel):
    effective_year: int = Field(..., ge=1900, le=9999)
    effective_month: int = Field(..., ge=1, le=12)
    confirm: bool = False


class ReallocationResult(BaseModel):
    effective_year: int
    effective_month: int
    monthly_allocation: int
    employees: List[ReallocatedEmployee]

    @property
    def records_updated(self) -> int:
        return sum(len(e.records) for e in self.employees)


class LeaveSummaryLine(BaseModel):
    employee_id: int
    employee_code: str
    name: str
    location: str
    opening: float
    allocated: float
    carried_forward: float
    used: float
    closing: float
    anomalies: List[LeaveAnomaly] = Field(default_factory=list)


class LeaveSummaryTotals(BaseModel):
    total_allocated: float = 0.0
    total_carried_forward: float = 0.0
    total_used: float = 0.0
    total_available: float = 0.0


class LeaveReport(BaseModel):
    year: int
    month: int
    employees: List[LeaveSummaryLine]
    summary: LeaveSummaryTotals
