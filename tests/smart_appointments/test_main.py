from smart_appointments.main import app, root


def test_root_reports_status() -> None:
    assert root() == {'status': 'Smart Appointments API Running'}


def test_all_routers_are_mounted() -> None:
    paths = {route.path for route in app.routes}

    assert {
        '/auth/me',
        '/appointments',
        '/appointments/today',
        '/appointments/upcoming',
        '/appointments/{appointment_id}',
        '/appointments/{appointment_id}/reminder',
        '/scheduling/duration-estimate',
        '/scheduling/no-show-risk/{user_id}',
        '/scheduling/alternative-slots',
        '/notifications/settings',
        '/notifications/email-settings',
        '/profile',
        '/admin/roles',
        '/admin/roles/{user_id}',
        '/admin/audit-logs',
        '/admin/predictions',
        '/admin/prediction-metrics',
    } <= paths
