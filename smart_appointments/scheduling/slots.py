import logging
from datetime import datetime

from smart_appointments.scheduling.busy_intervals import fetch_busy_intervals
from smart_appointments.scheduling.candidates import iter_candidate_slots
from smart_appointments.scheduling.conflicts import has_conflict
from smart_appointments.scheduling.fallback import generate_default_slots
from smart_appointments.scheduling.store import AppointmentStore, SchedulingStoreError
from smart_appointments.scheduling.types import AlternativeSlot

logger = logging.getLogger(__name__)

DEFAULT_ALTERNATIVE_COUNT = 3


async def find_alternative_slots(
    store: AppointmentStore,
    user_id: str,
    start_time: datetime,
    end_time: datetime,
    count: int = DEFAULT_ALTERNATIVE_COUNT,
    now: datetime | None = None,
) -> list[AlternativeSlot]:
    """Propose up to ``count`` conflict-free times for a meeting as long as ``start_time``..``end_time``.

    Falls back to unverified placeholder slots when the store cannot be read
    or when no grid slot in the horizon is free. A short but non-empty result
    is returned as-is.
    """
    now = now or datetime.now()
    duration = end_time - start_time

    try:
        busy_intervals = await fetch_busy_intervals(store, user_id, starting_from=now)
    except SchedulingStoreError:
        logger.warning('Falling back to default slots for user %s: appointment store unavailable', user_id)
        return generate_default_slots(duration, count, now=now)

    slots: list[AlternativeSlot] = []
    for candidate in iter_candidate_slots(duration, now):
        if len(slots) >= count:
            break
        if has_conflict(candidate, busy_intervals):
            continue
        slots.append(AlternativeSlot(start=candidate.start, end=candidate.end))

    if not slots:
        logger.info('No free slot in the next week for user %s, using default slots', user_id)
        return generate_default_slots(duration, count, now=now)

    return slots
