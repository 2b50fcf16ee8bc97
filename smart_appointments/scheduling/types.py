"""Value types shared by the scheduling heuristics."""

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True)
class TimeSlot:
    """A half-open ``[start, end)`` range of local time."""

    start: datetime
    end: datetime

    @property
    def duration_minutes(self) -> float:
        return (self.end - self.start) / timedelta(minutes=1)


@dataclass(frozen=True)
class AlternativeSlot:
    """A proposed meeting time.

    ``verified`` is False for fallback placeholders that were never checked
    against the user's calendar.
    """

    start: datetime
    end: datetime
    verified: bool = True


@dataclass(frozen=True)
class PastAppointment:
    title: str
    description: str | None
    start_time: datetime
    end_time: datetime

    def as_slot(self) -> TimeSlot:
        return TimeSlot(self.start_time, self.end_time)
