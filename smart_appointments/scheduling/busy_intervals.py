from datetime import datetime

from smart_appointments.scheduling.store import AppointmentStore
from smart_appointments.scheduling.types import TimeSlot


async def fetch_busy_intervals(store: AppointmentStore, user_id: str, starting_from: datetime) -> list[TimeSlot]:
    """Committed time ranges for ``user_id`` starting at or after ``starting_from``, earliest first.

    Raises ``SchedulingStoreError`` when the store is unreachable.
    """
    appointments = await store.list_appointments(user_id, starting_from=starting_from)
    return sorted((appointment.as_slot() for appointment in appointments), key=lambda slot: slot.start)
