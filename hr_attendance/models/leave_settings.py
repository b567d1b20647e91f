from sqlalchemy import Column, Integer, Float, DateTime
from sqlalchemy.sql import func
from hr_attendance.database import Base

class LeaveSettings(Base):
    """Single-row table holding the organization's active leave policy."""
    __tablename__ = "leave_settings"

    id = Column(Integer, primary_key=True, index=True)
    paid_leaves_per_year = Column(Integer, nullable=False)
    half_day_deduction = Column(Float, nullable=False)
    highlight_duration_hours = Column(Integer, default=24)  # UI only
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
