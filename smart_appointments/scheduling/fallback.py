from datetime import datetime, time, timedelta

from smart_appointments.scheduling.types import AlternativeSlot


FALLBACK_FIRST_HOUR = 9
FALLBACK_SPACING_HOURS = 2


def generate_default_slots(duration: timedelta, count: int, now: datetime | None = None) -> list[AlternativeSlot]:
    """Placeholder slots from tomorrow 09:00, one every two hours.

    Starts are spaced from the previous start, not its end, and nothing is
    checked against the calendar, so every slot is marked unverified.
    """
    now = now or datetime.now()
    first_start = datetime.combine(now.date() + timedelta(days=1), time(FALLBACK_FIRST_HOUR, 0))

    slots: list[AlternativeSlot] = []
    for index in range(count):
        start = first_start + timedelta(hours=index * FALLBACK_SPACING_HOURS)
        slots.append(AlternativeSlot(start=start, end=start + duration, verified=False))

    return slots
