from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from smart_appointments.auth.dependencies import CurrentUser, require_admin
from smart_appointments.database import DATABASE_UNAVAILABLE_DETAIL, get_db
from smart_appointments.models.audit_log import AuditLog
from smart_appointments.models.user import USER_ROLES, UserRole
from smart_appointments.routes.scheduling_routes import HIGH_NO_SHOW_RISK
from smart_appointments.scheduling.no_show import NO_SHOW_PREDICTION_ACTION

router = APIRouter(tags=['admin'])

DEFAULT_AUDIT_LOG_LIMIT = 50
DEFAULT_PREDICTION_LIMIT = 10


class AssignRoleRequest(BaseModel):
    role: str

    @field_validator('role')
    @classmethod
    def validate_role(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in USER_ROLES:
            raise ValueError('Invalid role.')
        return normalized


class UserRoleResponse(BaseModel):
    user_id: str
    role: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class AuditLogResponse(BaseModel):
    id: int
    user_id: str | None = None
    action: str
    table_name: str
    record_id: str | None = None
    details: dict[str, Any] | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class PredictionResponse(BaseModel):
    id: int
    user_id: str | None = None
    prediction: float
    created_at: datetime


class PredictionMetricsResponse(BaseModel):
    total_predictions: int
    average_prediction: float | None = None
    high_risk_share: float | None = None


def extract_prediction(entry: AuditLog) -> float | None:
    details = entry.details or {}
    value = details.get('prediction')
    if isinstance(value, (int, float)):
        return float(value)
    return None


def summarize_predictions(values: list[float]) -> PredictionMetricsResponse:
    if not values:
        return PredictionMetricsResponse(total_predictions=0)

    high_risk = [value for value in values if value > HIGH_NO_SHOW_RISK]
    return PredictionMetricsResponse(
        total_predictions=len(values),
        average_prediction=sum(values) / len(values),
        high_risk_share=len(high_risk) / len(values),
    )


@router.get('/roles', response_model=list[UserRoleResponse])
def list_user_roles(
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    del admin

    try:
        return db.query(UserRole).order_by(UserRole.user_id.asc()).all()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


@router.put('/roles/{user_id}', response_model=UserRoleResponse)
def assign_role(
    user_id: str,
    data: AssignRoleRequest,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    normalized_user_id = user_id.strip()
    if not normalized_user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='User id is required.',
        )

    try:
        user_role = db.query(UserRole).filter(UserRole.user_id == normalized_user_id).first()
        if user_role is None:
            user_role = UserRole(user_id=normalized_user_id, role=data.role)
            db.add(user_role)
        else:
            user_role.role = data.role

        db.add(
            AuditLog(
                user_id=admin.id,
                action='assign_role',
                table_name='user_roles',
                record_id=normalized_user_id,
                details={'assigned_role': data.role},
            )
        )
        db.commit()
        db.refresh(user_role)

        return user_role
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


@router.get('/audit-logs', response_model=list[AuditLogResponse])
def list_audit_logs(
    limit: int = Query(default=DEFAULT_AUDIT_LOG_LIMIT, ge=1, le=500),
    action: str | None = Query(default=None),
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    del admin

    try:
        query = db.query(AuditLog)
        if action:
            query = query.filter(AuditLog.action == action.strip())
        return query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit).all()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


@router.get('/predictions', response_model=list[PredictionResponse])
def list_recent_predictions(
    limit: int = Query(default=DEFAULT_PREDICTION_LIMIT, ge=1, le=100),
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    del admin

    try:
        entries = db.query(AuditLog).filter(
            AuditLog.action == NO_SHOW_PREDICTION_ACTION,
        ).order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit).all()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc

    predictions: list[PredictionResponse] = []
    for entry in entries:
        value = extract_prediction(entry)
        if value is None:
            continue
        predictions.append(
            PredictionResponse(id=entry.id, user_id=entry.user_id, prediction=value, created_at=entry.created_at)
        )

    return predictions


@router.get('/prediction-metrics', response_model=PredictionMetricsResponse)
def get_prediction_metrics(
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    del admin

    try:
        entries = db.query(AuditLog).filter(AuditLog.action == NO_SHOW_PREDICTION_ACTION).all()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc

    values = [value for value in (extract_prediction(entry) for entry in entries) if value is not None]
    return summarize_predictions(values)
