import logging
import math

from smart_appointments.scheduling.store import AppointmentStore, SchedulingStoreError
from smart_appointments.scheduling.types import PastAppointment

logger = logging.getLogger(__name__)

NO_HISTORY_DURATION_MINUTES = 60
UNAVAILABLE_DURATION_MINUTES = 30
DEFAULT_DURATION_MINUTES = 30
DURATION_INCREMENT_MINUTES = 15
MIN_KEYWORD_LENGTH = 4

# (minimum word count exclusive, minutes), longest first.
DESCRIPTION_LENGTH_DURATIONS = (
    (100, 60),
    (50, 45),
)


def title_keywords(title: str) -> list[str]:
    return [word for word in title.lower().split(' ') if len(word) >= MIN_KEYWORD_LENGTH]


def find_similar_appointments(title: str, history: list[PastAppointment]) -> list[PastAppointment]:
    keywords = title_keywords(title)
    return [
        appointment
        for appointment in history
        if any(keyword in appointment.title.lower() for keyword in keywords)
    ]


def round_to_increment(minutes: float, increment: int = DURATION_INCREMENT_MINUTES) -> int:
    # Halves round up, unlike round().
    return int(math.floor(minutes / increment + 0.5)) * increment


def duration_from_description(description: str | None) -> int:
    if not description:
        return DEFAULT_DURATION_MINUTES

    word_count = len(description.split(' '))
    for threshold, minutes in DESCRIPTION_LENGTH_DURATIONS:
        if word_count > threshold:
            return minutes

    return DEFAULT_DURATION_MINUTES


async def estimate_meeting_duration(
    store: AppointmentStore,
    user_id: str,
    title: str,
    description: str | None = None,
) -> int:
    """Recommend a meeting length in minutes from the user's similar past meetings."""
    try:
        history = await store.list_appointments(user_id)
    except SchedulingStoreError:
        logger.warning('Duration estimate for user %s used the default: appointment store unavailable', user_id)
        return UNAVAILABLE_DURATION_MINUTES

    if not history:
        return NO_HISTORY_DURATION_MINUTES

    similar = find_similar_appointments(title, history)
    if similar:
        average = sum(appointment.as_slot().duration_minutes for appointment in similar) / len(similar)
        return round_to_increment(average)

    return duration_from_description(description)
