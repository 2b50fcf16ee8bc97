import logging
from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from smart_appointments.auth import jwt_handler
from smart_appointments.database import get_db
from smart_appointments.models.user import UserRole

security = HTTPBearer()
logger = logging.getLogger(__name__)

DEFAULT_ROLE = "user"


@dataclass(frozen=True)
class CurrentUser:
    id: str
    email: str | None
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def is_admin_or_manager(self) -> bool:
        return self.role in {"admin", "manager"}


def resolve_role(user_id: str, token_role: str | None, db: Session) -> str:
    if token_role == "admin":
        return "admin"

    try:
        role_row = db.query(UserRole.role).filter(UserRole.user_id == user_id).first()
    except SQLAlchemyError:
        logger.exception("Role lookup failed for user %s, using default role", user_id)
        return DEFAULT_ROLE

    return role_row[0] if role_row else DEFAULT_ROLE


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> CurrentUser:
    token = credentials.credentials
    try:
        payload = jwt_handler.decode_access_token(token)
    except Exception as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token subject")

    app_metadata = payload.get("app_metadata") or {}
    role = resolve_role(user_id, app_metadata.get("role"), db)
    return CurrentUser(id=user_id, email=payload.get("email"), role=role)


def require_admin(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required.")
    return current_user

