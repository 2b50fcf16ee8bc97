"""User profile and role model definitions."""

from sqlalchemy import Column, DateTime, Integer, String, func
from smart_appointments.database import Base


USER_ROLES = ('admin', 'manager', 'user')


class Profile(Base):
    """Display details for a user of the identity provider."""
    __tablename__ = "profiles"

    id = Column(String(64), primary_key=True)
    first_name = Column(String)
    last_name = Column(String)
    avatar_url = Column(String)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class UserRole(Base):
    __tablename__ = "user_roles"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), unique=True, index=True, nullable=False)
    role = Column(String, nullable=False)  # admin/manager/user
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
