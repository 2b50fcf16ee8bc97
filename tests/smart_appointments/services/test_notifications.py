import logging
from datetime import datetime

import pytest

from smart_appointments.models.notification import EmailNotificationSetting
from smart_appointments.services import notifications

STARTS_AT = datetime(2026, 1, 6, 9, 30)


def add_email_settings(db, **overrides) -> None:
    values = {'user_id': 'user-1', 'email': 'ada@example.com'}
    values.update(overrides)
    db.add(EmailNotificationSetting(**values))
    db.commit()


def test_appointment_notification_is_sent_when_enabled(db_session, caplog: pytest.LogCaptureFixture) -> None:
    add_email_settings(db_session)

    with caplog.at_level(logging.INFO, logger='smart_appointments.services.notifications'):
        assert notifications.send_appointment_notification(db_session, 'user-1', 'Kickoff', STARTS_AT) is True

    assert 'ada@example.com' in caplog.text
    assert 'New Appointment Created' in caplog.text
    assert 'Jan 06, 2026 09:30 AM' in caplog.text


def test_appointment_notification_respects_opt_out(db_session) -> None:
    add_email_settings(db_session, notify_on_appointment=False)

    assert notifications.send_appointment_notification(db_session, 'user-1', 'Kickoff', STARTS_AT) is False


def test_appointment_notification_without_settings(db_session) -> None:
    assert notifications.send_appointment_notification(db_session, 'user-1', 'Kickoff', STARTS_AT) is False


def test_settings_change_notification(db_session, caplog: pytest.LogCaptureFixture) -> None:
    add_email_settings(db_session, notify_on_appointment=False)

    with caplog.at_level(logging.INFO, logger='smart_appointments.services.notifications'):
        assert notifications.send_settings_change_notification(db_session, 'user-1') is True

    assert 'Notification Settings Updated' in caplog.text


def test_reminder_email_is_rendered(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger='smart_appointments.services.notifications'):
        assert notifications.send_reminder_email('bob@example.com', 'Checkup', STARTS_AT) is True

    assert 'Reminder: Your appointment "Checkup" is coming up at Jan 06, 2026 09:30 AM.' in caplog.text


def test_background_entry_point_uses_its_own_session(
    session_factory,
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    db = session_factory()
    try:
        add_email_settings(db)
    finally:
        db.close()
    monkeypatch.setattr(notifications, 'SessionLocal', session_factory)

    with caplog.at_level(logging.INFO, logger='smart_appointments.services.notifications'):
        notifications.notify_appointment_created('user-1', 'Kickoff', STARTS_AT)

    assert 'New Appointment Created' in caplog.text
