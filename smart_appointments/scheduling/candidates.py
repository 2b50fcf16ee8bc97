from collections.abc import Iterator
from datetime import date, datetime, time, timedelta

from smart_appointments.scheduling.types import TimeSlot


SEARCH_HORIZON_DAYS = 7
CANDIDATE_START_HOURS = (9, 11, 13, 15, 17)


def is_business_day(day: date) -> bool:
    return day.weekday() < 5


def iter_candidate_slots(duration: timedelta, now: datetime) -> Iterator[TimeSlot]:
    """Yield the fixed slot grid from tomorrow through the search horizon.

    Days run in calendar order and hours in grid order, so for a fixed ``now``
    the sequence is deterministic. Weekend days and starts that are not
    strictly after ``now`` are skipped.
    """

    for day_offset in range(1, SEARCH_HORIZON_DAYS + 1):
        current_day = now.date() + timedelta(days=day_offset)
        if not is_business_day(current_day):
            continue

        for hour in CANDIDATE_START_HOURS:
            start = datetime.combine(current_day, time(hour, 0))
            if start <= now:
                continue
            yield TimeSlot(start, start + duration)
