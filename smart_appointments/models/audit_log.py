"""Audit log model definitions."""

from sqlalchemy import JSON, Column, DateTime, Integer, String, func
from smart_appointments.database import Base


class AuditLog(Base):
    """Append-only record of a user or system action."""
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), index=True)
    action = Column(String, index=True, nullable=False)
    table_name = Column(String, nullable=False)
    record_id = Column(String)
    details = Column(JSON)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
