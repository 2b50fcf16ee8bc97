import logging
import random
from typing import Protocol

from smart_appointments.scheduling.audit import AuditSink
from smart_appointments.scheduling.store import AppointmentStore, SchedulingStoreError
from smart_appointments.scheduling.types import PastAppointment

logger = logging.getLogger(__name__)

DEFAULT_NO_SHOW_PROBABILITY = 0.1
NO_SHOW_PREDICTION_ACTION = 'no_show_prediction'


class NoShowPredictor(Protocol):
    def predict(self, history: list[PastAppointment]) -> float:
        ...


class RandomNoShowPredictor:
    """Placeholder model: a uniform draw from ``[low, high)`` whatever the history."""

    def __init__(self, low: float = 0.1, high: float = 0.3, rng: random.Random | None = None) -> None:
        self.low = low
        self.high = high
        self._rng = rng or random.Random()

    def predict(self, history: list[PastAppointment]) -> float:
        return self.low + self._rng.random() * (self.high - self.low)


class NoShowRiskScorer:
    def __init__(
        self,
        store: AppointmentStore,
        audit_sink: AuditSink,
        predictor: NoShowPredictor | None = None,
    ) -> None:
        self.store = store
        self.audit_sink = audit_sink
        self.predictor = predictor or RandomNoShowPredictor()

    async def predict(self, user_id: str) -> float:
        """Probability that ``user_id`` misses a meeting.

        Only scored predictions are audited; the empty-history and
        store-failure defaults are not.
        """
        try:
            history = await self.store.list_appointments(user_id, newest_first=True)
        except SchedulingStoreError:
            logger.warning('No-show risk for user %s used the default: appointment store unavailable', user_id)
            return DEFAULT_NO_SHOW_PROBABILITY

        if not history:
            return DEFAULT_NO_SHOW_PROBABILITY

        probability = min(1.0, max(0.0, self.predictor.predict(history)))

        self.audit_sink.submit(
            NO_SHOW_PREDICTION_ACTION,
            user_id=user_id,
            details={'prediction': probability},
            table_name='appointments',
        )

        return probability
