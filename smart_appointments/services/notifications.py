"""Email notifications for appointment and settings events.

Delivery belongs to the mail provider; this module decides whether a user
wants a message, renders it and hands it to the log.
"""

import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from smart_appointments.database import SessionLocal
from smart_appointments.models.notification import EmailNotificationSetting

logger = logging.getLogger(__name__)


def format_appointment_time(starts_at: datetime) -> str:
    return starts_at.strftime('%b %d, %Y %I:%M %p')


def _deliver(recipient: str, subject: str, body: str) -> None:
    logger.info('Email notification to %s | Subject: %s | Body: %s', recipient, subject, body)


def _find_email_settings(db: Session, user_id: str, flag) -> EmailNotificationSetting | None:
    return db.query(EmailNotificationSetting).filter(
        EmailNotificationSetting.user_id == user_id,
        flag.is_(True),
    ).first()


def send_appointment_notification(db: Session, user_id: str, title: str, starts_at: datetime) -> bool:
    try:
        settings = _find_email_settings(db, user_id, EmailNotificationSetting.notify_on_appointment)
    except SQLAlchemyError:
        logger.exception('Failed to load email settings for user %s', user_id)
        return False

    if settings is None:
        logger.info('No appointment email notifications enabled for user %s', user_id)
        return False

    _deliver(
        settings.email,
        'New Appointment Created',
        f'Your appointment "{title}" has been scheduled for {format_appointment_time(starts_at)}',
    )
    return True


def send_settings_change_notification(db: Session, user_id: str) -> bool:
    try:
        settings = _find_email_settings(db, user_id, EmailNotificationSetting.notify_on_settings_change)
    except SQLAlchemyError:
        logger.exception('Failed to load email settings for user %s', user_id)
        return False

    if settings is None:
        logger.info('No settings change email notifications enabled for user %s', user_id)
        return False

    _deliver(
        settings.email,
        'Notification Settings Updated',
        'Your notification settings have been updated. If you did not make this change, please contact support.',
    )
    return True


def send_reminder_email(recipient: str, title: str, starts_at: datetime) -> bool:
    _deliver(
        recipient,
        'Reminder: Upcoming Appointment',
        f'Reminder: Your appointment "{title}" is coming up at {format_appointment_time(starts_at)}.',
    )
    return True


def notify_appointment_created(user_id: str, title: str, starts_at: datetime) -> None:
    # Runs after the response is sent, when the request session is already closed.
    db = SessionLocal()
    try:
        send_appointment_notification(db, user_id, title, starts_at)
    finally:
        db.close()


def notify_settings_changed(user_id: str) -> None:
    db = SessionLocal()
    try:
        send_settings_change_notification(db, user_id)
    finally:
        db.close()
