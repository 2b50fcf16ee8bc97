import asyncio
import random
from datetime import datetime, timedelta

from smart_appointments.scheduling.audit import AuditSink
from smart_appointments.scheduling.no_show import (
    DEFAULT_NO_SHOW_PROBABILITY,
    NO_SHOW_PREDICTION_ACTION,
    NoShowRiskScorer,
    RandomNoShowPredictor,
)
from smart_appointments.scheduling.types import PastAppointment


class FixedPredictor:
    def __init__(self, value: float) -> None:
        self.value = value
        self.histories = []

    def predict(self, history):
        self.histories.append(history)
        return self.value


class FailingWriter:
    def __init__(self) -> None:
        self.attempts = 0

    def write(self, action, user_id, details, table_name, record_id) -> None:
        self.attempts += 1
        raise RuntimeError('audit table offline')


def history() -> list[PastAppointment]:
    start = datetime(2025, 12, 1, 9, 0)
    return [
        PastAppointment('Check-in', None, start, start + timedelta(minutes=30)),
        PastAppointment('Follow-up', None, start + timedelta(days=7), start + timedelta(days=7, minutes=30)),
    ]


def test_empty_history_returns_default_without_audit(fake_store_factory, recording_audit_sink) -> None:
    scorer = NoShowRiskScorer(fake_store_factory(), recording_audit_sink)

    assert asyncio.run(scorer.predict('user-1')) == DEFAULT_NO_SHOW_PROBABILITY
    assert recording_audit_sink.records == []


def test_store_failure_returns_default_without_audit(fake_store_factory, recording_audit_sink) -> None:
    scorer = NoShowRiskScorer(fake_store_factory(error=True), recording_audit_sink)

    assert asyncio.run(scorer.predict('user-1')) == DEFAULT_NO_SHOW_PROBABILITY
    assert recording_audit_sink.records == []


def test_scored_prediction_is_audited(fake_store_factory, recording_audit_sink) -> None:
    store = fake_store_factory(history())
    predictor = FixedPredictor(0.25)
    scorer = NoShowRiskScorer(store, recording_audit_sink, predictor)

    assert asyncio.run(scorer.predict('user-1')) == 0.25
    assert recording_audit_sink.records == [
        {
            'action': NO_SHOW_PREDICTION_ACTION,
            'user_id': 'user-1',
            'details': {'prediction': 0.25},
            'table_name': 'appointments',
            'record_id': None,
        }
    ]
    assert store.calls[0]['newest_first'] is True
    assert [item.title for item in predictor.histories[0]] == ['Follow-up', 'Check-in']


def test_prediction_is_clamped_to_probability_range(fake_store_factory, recording_audit_sink) -> None:
    scorer = NoShowRiskScorer(fake_store_factory(history()), recording_audit_sink, FixedPredictor(1.7))

    assert asyncio.run(scorer.predict('user-1')) == 1.0


def test_random_predictor_stays_in_placeholder_band() -> None:
    predictor = RandomNoShowPredictor(rng=random.Random(7))

    values = [predictor.predict(history()) for _ in range(500)]

    assert all(0.1 <= value < 0.3 for value in values)
    assert len(set(values)) > 1


def test_audit_failure_does_not_change_the_result(fake_store_factory) -> None:
    writer = FailingWriter()
    sink = AuditSink(writer)
    scorer = NoShowRiskScorer(fake_store_factory(history()), sink, FixedPredictor(0.2))

    async def run() -> float:
        value = await scorer.predict('user-1')
        await sink.drain()
        return value

    assert asyncio.run(run()) == 0.2
    assert writer.attempts == 1
