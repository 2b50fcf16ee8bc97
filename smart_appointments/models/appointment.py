"""Appointment model definitions."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func
from smart_appointments.database import Base


APPOINTMENT_PRIORITIES = ('low', 'normal', 'high')


class Appointment(Base):
    """Represents a scheduled appointment owned by one user."""
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), index=True, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    priority = Column(String, default='normal', nullable=False)
    is_multi_person = Column(Boolean, default=False, nullable=False)
    reminder_email = Column(String)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Participant(Base):
    """A user invited to a multi-person appointment."""
    __tablename__ = "participants"

    id = Column(Integer, primary_key=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id", ondelete="CASCADE"), index=True, nullable=False)
    user_id = Column(String(64), index=True, nullable=False)
    status = Column(String, default='pending', nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
