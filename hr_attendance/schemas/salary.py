from pydantic import BaseModel, ConfigDict, Field, field_serializer
from typing import List, Optional

MONEY_FIELDS = ("per_day_rate", "gross_salary", "net_salary", "advance", "total_salary")


class Advance(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: int
    year: int
    month: int = Field(..., ge=1, le=12)
    amount: float = Field(..., ge=0)


class AdvanceUpdate(BaseModel):
    year: int = Field(..., ge=1900, le=9999)
    month: int = Field(..., ge=1, le=12)
    amount: float = Field(..., ge=0)


class SalaryReportLine(BaseModel):
    """
    Derived salary figures for one employee and month.
    Values are held unrounded; rounding to two decimals happens on serialization.
    """
    employee_id: int
    employee_code: str
    name: str
    location: str
    month: int
    year: int
    days_in_month: int
    present_days: int = 0
    half_days: int = 0
    absent_days: int = 0
    leave_days: int = 0
    unrecorded_days: int = 0
    per_day_rate: float = 0.0
    gross_salary: float = 0.0
    net_salary: float = 0.0
    advance: float = 0.0
    total_salary: float = 0.0

    @field_serializer(*MONEY_FIELDS)
    def _round_money(self, value: float) -> float:
        return round(value, 2)


class SalaryTotals(BaseModel):
    employee_count: int = 0
    unique_locations: int = 0
    present_days: int = 0
    half_days: int = 0
    absent_days: int = 0
    leave_days: int = 0
    unrecorded_days: int = 0
    gross_salary: float = 0.0
    net_salary: float = 0.0
    advance: float = 0.0
    total_salary: float = 0.0

    @field_serializer("gross_salary", "net_salary", "advance", "total_salary")
    def _round_money(self, value: float) -> float:
        return round(value, 2)


class SalaryReport(BaseModel):
    month: int
    year: int
    location: Optional[str] = None
    employees: List[SalaryReportLine]
    totals: SalaryTotals
