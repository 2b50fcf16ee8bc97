import pytest
from fastapi import BackgroundTasks, HTTPException
from pydantic import ValidationError

from smart_appointments.auth.dependencies import CurrentUser
from smart_appointments.routes.notification_routes import (
    EmailSettingsRequest,
    NotificationSettingsRequest,
    get_email_settings,
    get_notification_settings,
    update_email_settings,
    update_notification_settings,
)
from smart_appointments.routes.profile_routes import UpdateProfileRequest, get_profile, update_profile
from smart_appointments.services import notifications

USER = CurrentUser(id='user-1', email='ada@example.com', role='user')


def test_notification_settings_are_created_with_defaults(db_session) -> None:
    settings = get_notification_settings(current_user=USER, db=db_session)

    assert settings.push_enabled is True
    assert settings.reminder_minutes == 15
    assert settings.push_token is None


def test_disabling_push_clears_the_token(db_session) -> None:
    update_notification_settings(
        data=NotificationSettingsRequest(push_enabled=True, push_token='device-token', reminder_minutes=30),
        current_user=USER,
        db=db_session,
    )

    settings = update_notification_settings(
        data=NotificationSettingsRequest(push_enabled=False, push_token='device-token', reminder_minutes=30),
        current_user=USER,
        db=db_session,
    )

    assert settings.push_enabled is False
    assert settings.push_token is None
    assert settings.reminder_minutes == 30


def test_reminder_minutes_must_be_non_negative() -> None:
    with pytest.raises(ValidationError):
        NotificationSettingsRequest(push_enabled=True, reminder_minutes=-1)


def test_email_settings_missing_returns_not_found(db_session) -> None:
    with pytest.raises(HTTPException) as exception_info:
        get_email_settings(current_user=USER, db=db_session)

    assert exception_info.value.status_code == 404


def test_updating_email_settings_queues_change_notification(db_session) -> None:
    background_tasks = BackgroundTasks()

    settings = update_email_settings(
        data=EmailSettingsRequest(email=' Ada@Example.com ', notify_on_appointment=False),
        background_tasks=background_tasks,
        current_user=USER,
        db=db_session,
    )

    assert settings.email == 'ada@example.com'
    assert settings.notify_on_appointment is False
    assert get_email_settings(current_user=USER, db=db_session).notify_on_settings_change is True
    assert [task.func for task in background_tasks.tasks] == [notifications.notify_settings_changed]
    assert background_tasks.tasks[0].args == ('user-1',)


def test_email_settings_reject_invalid_address() -> None:
    with pytest.raises(ValidationError):
        EmailSettingsRequest(email='not-an-address')


def test_profile_defaults_to_empty_for_new_user(db_session) -> None:
    profile = get_profile(current_user=USER, db=db_session)

    assert profile.id == 'user-1'
    assert profile.first_name is None


def test_update_profile(db_session) -> None:
    update_profile(
        data=UpdateProfileRequest(first_name=' Ada ', last_name='Lovelace', avatar_url=' '),
        current_user=USER,
        db=db_session,
    )

    profile = get_profile(current_user=USER, db=db_session)

    assert (profile.first_name, profile.last_name, profile.avatar_url) == ('Ada', 'Lovelace', None)


def test_profile_rejects_non_http_avatar() -> None:
    with pytest.raises(ValidationError):
        UpdateProfileRequest(avatar_url='ftp://example.com/me.png')
