from datetime import date, datetime, time, timedelta

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from pydantic import BaseModel, field_validator, model_validator
from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from smart_appointments.auth.dependencies import CurrentUser, get_current_user
from smart_appointments.database import DATABASE_UNAVAILABLE_DETAIL, ensure_appointment_schema, get_db
from smart_appointments.models.appointment import APPOINTMENT_PRIORITIES, Appointment, Participant
from smart_appointments.models.audit_log import AuditLog
from smart_appointments.services import notifications

router = APIRouter(tags=['appointments'])

MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 5000
DEFAULT_UPCOMING_COUNT = 5


class CreateAppointmentRequest(BaseModel):
    title: str
    description: str | None = None
    start_time: datetime
    end_time: datetime
    priority: str = 'normal'
    participant_ids: list[str] = []
    reminder_email: str | None = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Title is required.')
        if len(normalized) > MAX_TITLE_LENGTH:
            raise ValueError(f'Title must be {MAX_TITLE_LENGTH} characters or fewer.')
        return normalized

    @field_validator('description')
    @classmethod
    def validate_description(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if not normalized:
            return None

        if len(normalized) > MAX_DESCRIPTION_LENGTH:
            raise ValueError(f'Description must be {MAX_DESCRIPTION_LENGTH} characters or fewer.')

        return normalized

    @field_validator('priority')
    @classmethod
    def validate_priority(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in APPOINTMENT_PRIORITIES:
            raise ValueError('Invalid priority.')
        return normalized

    @field_validator('participant_ids')
    @classmethod
    def validate_participant_ids(cls, value: list[str]) -> list[str]:
        unique_ids: list[str] = []
        for participant_id in value:
            normalized = participant_id.strip()
            if normalized and normalized not in unique_ids:
                unique_ids.append(normalized)
        return unique_ids

    @field_validator('reminder_email')
    @classmethod
    def validate_reminder_email(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip().lower()
        return normalized or None

    @model_validator(mode='after')
    def validate_time_range(self) -> 'CreateAppointmentRequest':
        if self.end_time <= self.start_time:
            raise ValueError('End time must be after start time.')
        return self


class ReminderRequest(BaseModel):
    recipient_email: str | None = None

    @field_validator('recipient_email')
    @classmethod
    def validate_recipient_email(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip().lower()
        if not normalized:
            return None
        if '@' not in normalized:
            raise ValueError('A valid email address is required.')
        return normalized


class AppointmentResponse(BaseModel):
    id: int
    user_id: str
    title: str
    description: str | None = None
    start_time: datetime
    end_time: datetime
    priority: str
    is_multi_person: bool
    reminder_email: str | None = None
    participant_ids: list[str] = []

    class Config:
        from_attributes = True


class ReminderResponse(BaseModel):
    success: bool
    message: str


def ensure_database_ready() -> None:
    try:
        ensure_appointment_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


def to_response(appointment: Appointment, participant_ids: list[str]) -> AppointmentResponse:
    return AppointmentResponse(
        id=appointment.id,
        user_id=appointment.user_id,
        title=appointment.title,
        description=appointment.description,
        start_time=appointment.start_time,
        end_time=appointment.end_time,
        priority=appointment.priority or 'normal',
        is_multi_person=bool(appointment.is_multi_person),
        reminder_email=appointment.reminder_email,
        participant_ids=participant_ids,
    )


def load_participant_ids(appointment_ids: list[int], db: Session) -> dict[int, list[str]]:
    participant_ids: dict[int, list[str]] = {appointment_id: [] for appointment_id in appointment_ids}
    if not appointment_ids:
        return participant_ids

    rows = db.query(Participant.appointment_id, Participant.user_id).filter(
        Participant.appointment_id.in_(appointment_ids),
    ).order_by(Participant.id.asc()).all()
    for appointment_id, user_id in rows:
        participant_ids[appointment_id].append(user_id)

    return participant_ids


def query_visible_appointments(user_id: str, db: Session):
    participating = select(Participant.appointment_id).where(Participant.user_id == user_id)
    return db.query(Appointment).filter(
        or_(Appointment.user_id == user_id, Appointment.id.in_(participating)),
    )


def list_appointments_between(
    user_id: str,
    db: Session,
    range_start: datetime | None = None,
    range_end: datetime | None = None,
    limit: int | None = None,
) -> list[AppointmentResponse]:
    try:
        query = query_visible_appointments(user_id, db)
        if range_start is not None:
            query = query.filter(Appointment.start_time >= range_start)
        if range_end is not None:
            query = query.filter(Appointment.start_time < range_end)
        query = query.order_by(Appointment.start_time.asc())
        if limit is not None:
            query = query.limit(limit)

        appointments = query.all()
        participant_ids = load_participant_ids([appointment.id for appointment in appointments], db)

        return [to_response(appointment, participant_ids[appointment.id]) for appointment in appointments]
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


@router.get('', response_model=list[AppointmentResponse])
def list_my_appointments(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    return list_appointments_between(current_user.id, db)


@router.get('/today', response_model=list[AppointmentResponse])
def list_todays_appointments(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    today_start = datetime.combine(date.today(), time.min)
    return list_appointments_between(
        current_user.id,
        db,
        range_start=today_start,
        range_end=today_start + timedelta(days=1),
    )


@router.get('/upcoming', response_model=list[AppointmentResponse])
def list_upcoming_appointments(
    count: int = Query(default=DEFAULT_UPCOMING_COUNT, ge=1, le=50),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    return list_appointments_between(
        current_user.id,
        db,
        range_start=datetime.combine(date.today(), time.min),
        limit=count,
    )


@router.post('', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: CreateAppointmentRequest,
    background_tasks: BackgroundTasks,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    participant_ids = [participant_id for participant_id in data.participant_ids if participant_id != current_user.id]

    try:
        appointment = Appointment(
            user_id=current_user.id,
            title=data.title,
            description=data.description,
            start_time=data.start_time.replace(second=0, microsecond=0),
            end_time=data.end_time.replace(second=0, microsecond=0),
            priority=data.priority,
            is_multi_person=bool(participant_ids),
            reminder_email=data.reminder_email,
        )
        db.add(appointment)
        db.flush()

        for participant_id in participant_ids:
            db.add(Participant(appointment_id=appointment.id, user_id=participant_id, status='pending'))

        db.add(
            AuditLog(
                user_id=current_user.id,
                action='create_appointment',
                table_name='appointments',
                record_id=str(appointment.id),
                details={'title': appointment.title, 'participants': len(participant_ids)},
            )
        )
        db.commit()
        db.refresh(appointment)
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc

    background_tasks.add_task(
        notifications.notify_appointment_created,
        current_user.id,
        appointment.title,
        appointment.start_time,
    )

    return to_response(appointment, participant_ids)


@router.delete('/{appointment_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_appointment(
    appointment_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()

        if not appointment:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail='Appointment not found.',
            )

        if appointment.user_id != current_user.id and not current_user.is_admin:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail='Only the owner of this appointment can delete it.',
            )

        db.query(Participant).filter(Participant.appointment_id == appointment.id).delete()
        db.delete(appointment)
        db.add(
            AuditLog(
                user_id=current_user.id,
                action='delete_appointment',
                table_name='appointments',
                record_id=str(appointment_id),
                details={'title': appointment.title},
            )
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


@router.post('/{appointment_id}/reminder', response_model=ReminderResponse)
def send_appointment_reminder(
    appointment_id: int,
    data: ReminderRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc

    if not appointment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Appointment not found.',
        )

    if appointment.user_id != current_user.id and not current_user.is_admin_or_manager:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail='Only the owner of this appointment can send reminders.',
        )

    recipient = data.recipient_email or appointment.reminder_email
    if not recipient:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='No reminder email address for this appointment.',
        )

    notifications.send_reminder_email(recipient, appointment.title, appointment.start_time)
    return ReminderResponse(success=True, message='Reminder email sent successfully')
