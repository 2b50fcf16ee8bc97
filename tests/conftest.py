import os

os.environ.setdefault('DATABASE_URL', 'sqlite://')

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from smart_appointments.database import Base  # noqa: E402
from smart_appointments.models import appointment, audit_log, notification, user  # noqa: E402,F401
from smart_appointments.scheduling.store import SchedulingStoreError  # noqa: E402


class FakeAppointmentStore:
    def __init__(self, history=None, error: bool = False) -> None:
        self.history = list(history or [])
        self.error = error
        self.calls: list[dict] = []

    async def list_appointments(self, user_id, starting_from=None, newest_first=False):
        self.calls.append({'user_id': user_id, 'starting_from': starting_from, 'newest_first': newest_first})
        if self.error:
            raise SchedulingStoreError('store offline')

        rows = [row for row in self.history if starting_from is None or row.start_time >= starting_from]
        return sorted(rows, key=lambda row: row.start_time, reverse=newest_first)


class RecordingAuditSink:
    def __init__(self) -> None:
        self.records: list[dict] = []

    def submit(self, action, user_id, details=None, table_name='appointments', record_id=None):
        self.records.append(
            {
                'action': action,
                'user_id': user_id,
                'details': details,
                'table_name': table_name,
                'record_id': record_id,
            }
        )

    async def drain(self) -> None:
        return None


@pytest.fixture
def fake_store_factory():
    return FakeAppointmentStore


@pytest.fixture
def recording_audit_sink() -> RecordingAuditSink:
    return RecordingAuditSink()


@pytest.fixture
def session_factory():
    # StaticPool keeps one connection so worker threads see the same in-memory database.
    engine = create_engine('sqlite://', connect_args={'check_same_thread': False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    try:
        yield testing_session_local
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
