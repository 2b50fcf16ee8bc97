"""Read access to a user's appointments for the scheduling heuristics."""

import asyncio
import logging
from datetime import datetime
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from smart_appointments.models.appointment import Appointment
from smart_appointments.scheduling.types import PastAppointment

logger = logging.getLogger(__name__)


class SchedulingStoreError(Exception):
    """The appointment store could not be reached or failed mid-query."""


class AppointmentStore(Protocol):
    """Source of a user's appointments, oldest first unless ``newest_first``.

    Implementations must raise ``SchedulingStoreError`` for every retrieval
    failure; the heuristics fall back to their defaults only on that error.
    Wrap backend exceptions with ``raise SchedulingStoreError(...) from exc``.
    """

    async def list_appointments(
        self,
        user_id: str,
        starting_from: datetime | None = None,
        newest_first: bool = False,
    ) -> list[PastAppointment]:
        ...


class SqlAppointmentStore:
    """Runs the blocking SQLAlchemy query in a worker thread, one session per call."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    async def list_appointments(
        self,
        user_id: str,
        starting_from: datetime | None = None,
        newest_first: bool = False,
    ) -> list[PastAppointment]:
        return await asyncio.to_thread(self._query, user_id, starting_from, newest_first)

    def _query(self, user_id: str, starting_from: datetime | None, newest_first: bool) -> list[PastAppointment]:
        db: Session = self._session_factory()
        try:
            query = db.query(
                Appointment.title,
                Appointment.description,
                Appointment.start_time,
                Appointment.end_time,
            ).filter(Appointment.user_id == user_id)

            if starting_from is not None:
                query = query.filter(Appointment.start_time >= starting_from)

            order = Appointment.start_time.desc() if newest_first else Appointment.start_time.asc()
            rows = query.order_by(order).all()
        except SQLAlchemyError as exc:
            logger.exception('Appointment lookup failed for user %s', user_id)
            raise SchedulingStoreError('Appointment store unavailable.') from exc
        finally:
            db.close()

        return [
            PastAppointment(
                title=title,
                description=description,
                start_time=start_time,
                end_time=end_time,
            )
            for title, description, start_time, end_time in rows
        ]
