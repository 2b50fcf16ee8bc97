"""Notification preference model definitions."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, func
from smart_appointments.database import Base


class NotificationSetting(Base):
    """Push reminder preferences."""
    __tablename__ = "notification_settings"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), unique=True, index=True, nullable=False)
    push_enabled = Column(Boolean, default=True, nullable=False)
    push_token = Column(String)
    reminder_minutes = Column(Integer, default=15, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class EmailNotificationSetting(Base):
    """Email notification preferences."""
    __tablename__ = "email_notifications"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), unique=True, index=True, nullable=False)
    email = Column(String, nullable=False)
    notify_on_appointment = Column(Boolean, default=True, nullable=False)
    notify_on_settings_change = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
