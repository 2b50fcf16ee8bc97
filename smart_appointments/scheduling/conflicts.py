from collections.abc import Iterable

from smart_appointments.scheduling.types import TimeSlot


def intervals_overlap(first: TimeSlot, second: TimeSlot) -> bool:
    # Half-open intervals: sharing only a boundary instant is not an overlap.
    return first.start < second.end and second.start < first.end


def has_conflict(candidate: TimeSlot, busy_intervals: Iterable[TimeSlot]) -> bool:
    return any(intervals_overlap(candidate, busy) for busy in busy_intervals)
