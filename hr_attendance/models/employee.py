"""
Employee roster and per-month paid leave ledger rows.
"""
from sqlalchemy import Column, Integer, String, Float, Date, DateTime, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from hr_attendance.database import Base


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    employee_code = Column(String, unique=True, index=True, nullable=False)  # Human-facing id like "EMP-0042"
    name = Column(String, nullable=False)
    location = Column(String, index=True, nullable=False)
    department = Column(String, nullable=True)
    designation = Column(String, nullable=True)
    salary = Column(Float, default=0.0, nullable=False)
    join_date = Column(Date, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    monthly_leaves = relationship(
        "MonthlyLeave",
        back_populates="employee",
        cascade="all, delete-orphan",
        order_by=lambda: [MonthlyLeave.year, MonthlyLeave.month],
    )
    advances = relationship("Advance", back_populates="employee", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Employee {self.employee_code}: {self.name}>"


class MonthlyLeave(Base):
    __tablename__ = "monthly_leaves"
    __table_args__ = (
        UniqueConstraint("employee_id", "year", "month", name="uq_monthly_leave_period"),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)  # 1-12
    allocated = Column(Float, default=0.0, nullable=False)
    carried_forward = Column(Float, default=0.0, nullable=False)
    used = Column(Float, default=0.0, nullable=False)
    available = Column(Float, default=0.0, nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    employee = relationship("Employee", back_populates="monthly_leaves")
