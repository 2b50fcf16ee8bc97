from datetime import datetime, timedelta
from itertools import islice

from smart_appointments.scheduling.candidates import iter_candidate_slots
from smart_appointments.scheduling.types import TimeSlot

MONDAY_MORNING = datetime(2026, 1, 5, 8, 0)


def test_first_candidates_start_tomorrow_on_the_hour_grid() -> None:
    candidates = list(islice(iter_candidate_slots(timedelta(minutes=60), MONDAY_MORNING), 3))

    assert candidates == [
        TimeSlot(datetime(2026, 1, 6, 9, 0), datetime(2026, 1, 6, 10, 0)),
        TimeSlot(datetime(2026, 1, 6, 11, 0), datetime(2026, 1, 6, 12, 0)),
        TimeSlot(datetime(2026, 1, 6, 13, 0), datetime(2026, 1, 6, 14, 0)),
    ]


def test_grid_covers_seven_days_without_weekends() -> None:
    candidates = list(iter_candidate_slots(timedelta(minutes=30), MONDAY_MORNING))

    # Tuesday through Friday plus the following Monday.
    assert len(candidates) == 25
    assert all(candidate.start.weekday() < 5 for candidate in candidates)
    assert all(candidate.start > MONDAY_MORNING for candidate in candidates)
    assert candidates[-1] == TimeSlot(datetime(2026, 1, 12, 17, 0), datetime(2026, 1, 12, 17, 30))


def test_friday_search_skips_to_monday() -> None:
    friday = datetime(2026, 1, 9, 10, 0)

    first = next(iter_candidate_slots(timedelta(minutes=45), friday))

    assert first == TimeSlot(datetime(2026, 1, 12, 9, 0), datetime(2026, 1, 12, 9, 45))


def test_candidates_are_ordered_by_day_then_hour() -> None:
    starts = [candidate.start for candidate in iter_candidate_slots(timedelta(minutes=15), MONDAY_MORNING)]

    assert starts == sorted(starts)
    assert [start.hour for start in starts[:5]] == [9, 11, 13, 15, 17]
