from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from smart_appointments.auth.dependencies import CurrentUser, get_current_user
from smart_appointments.database import DATABASE_UNAVAILABLE_DETAIL, get_db
from smart_appointments.models.notification import EmailNotificationSetting, NotificationSetting
from smart_appointments.services import notifications

router = APIRouter(tags=['notifications'])

DEFAULT_REMINDER_MINUTES = 15
MAX_REMINDER_MINUTES = 7 * 24 * 60


class NotificationSettingsRequest(BaseModel):
    push_enabled: bool
    push_token: str | None = None
    reminder_minutes: int = Field(default=DEFAULT_REMINDER_MINUTES, ge=0, le=MAX_REMINDER_MINUTES)


class NotificationSettingsResponse(BaseModel):
    push_enabled: bool
    push_token: str | None = None
    reminder_minutes: int

    class Config:
        from_attributes = True


class EmailSettingsRequest(BaseModel):
    email: str
    notify_on_appointment: bool = True
    notify_on_settings_change: bool = True

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = value.strip().lower()
        if '@' not in normalized:
            raise ValueError('A valid email address is required.')
        return normalized


class EmailSettingsResponse(BaseModel):
    email: str
    notify_on_appointment: bool
    notify_on_settings_change: bool

    class Config:
        from_attributes = True


@router.get('/settings', response_model=NotificationSettingsResponse)
def get_notification_settings(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        settings = db.query(NotificationSetting).filter(NotificationSetting.user_id == current_user.id).first()
        if settings is None:
            settings = NotificationSetting(
                user_id=current_user.id,
                push_enabled=True,
                reminder_minutes=DEFAULT_REMINDER_MINUTES,
            )
            db.add(settings)
            db.commit()
            db.refresh(settings)

        return settings
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


@router.put('/settings', response_model=NotificationSettingsResponse)
def update_notification_settings(
    data: NotificationSettingsRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        settings = db.query(NotificationSetting).filter(NotificationSetting.user_id == current_user.id).first()
        if settings is None:
            settings = NotificationSetting(user_id=current_user.id)
            db.add(settings)

        settings.push_enabled = data.push_enabled
        settings.push_token = data.push_token if data.push_enabled else None
        settings.reminder_minutes = data.reminder_minutes
        db.commit()
        db.refresh(settings)

        return settings
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


@router.get('/email-settings', response_model=EmailSettingsResponse)
def get_email_settings(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        settings = db.query(EmailNotificationSetting).filter(
            EmailNotificationSetting.user_id == current_user.id,
        ).first()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc

    if settings is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Email notifications are not configured.',
        )

    return settings


@router.put('/email-settings', response_model=EmailSettingsResponse)
def update_email_settings(
    data: EmailSettingsRequest,
    background_tasks: BackgroundTasks,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        settings = db.query(EmailNotificationSetting).filter(
            EmailNotificationSetting.user_id == current_user.id,
        ).first()
        if settings is None:
            settings = EmailNotificationSetting(user_id=current_user.id, email=data.email)
            db.add(settings)

        settings.email = data.email
        settings.notify_on_appointment = data.notify_on_appointment
        settings.notify_on_settings_change = data.notify_on_settings_change
        db.commit()
        db.refresh(settings)
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc

    background_tasks.add_task(notifications.notify_settings_changed, current_user.id)
    return settings
