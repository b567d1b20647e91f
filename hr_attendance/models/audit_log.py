from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from hr_attendance.database import Base

class AuditLog(Base):
    """Append-only trail of attendance and leave-policy mutations."""
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    action = Column(String, index=True, nullable=False)
    entity_type = Column(String, index=True, nullable=False)
    entity_id = Column(String, nullable=True)
    details = Column(JSON, nullable=True)
    before_state = Column(JSON, nullable=True)
    after_state = Column(JSON, nullable=True)
    timestamp = Column(DateTime(timezone=True), server_default=func.now())
