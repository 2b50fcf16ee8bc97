from datetime import datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field, model_validator

from smart_appointments.auth.dependencies import CurrentUser, get_current_user
from smart_appointments.database import SessionLocal
from smart_appointments.scheduling.audit import AuditSink, SqlAuditWriter
from smart_appointments.scheduling.duration import estimate_meeting_duration
from smart_appointments.scheduling.no_show import NoShowRiskScorer
from smart_appointments.scheduling.slots import DEFAULT_ALTERNATIVE_COUNT, find_alternative_slots
from smart_appointments.scheduling.store import AppointmentStore, SqlAppointmentStore

router = APIRouter(tags=['scheduling'])

HIGH_NO_SHOW_RISK = 0.2
MAX_ALTERNATIVE_COUNT = 10

_audit_sink = AuditSink(SqlAuditWriter(SessionLocal))


class AlternativeSlotsRequest(BaseModel):
    start_time: datetime
    end_time: datetime
    count: int = Field(default=DEFAULT_ALTERNATIVE_COUNT, ge=1, le=MAX_ALTERNATIVE_COUNT)

    @model_validator(mode='after')
    def validate_time_range(self) -> 'AlternativeSlotsRequest':
        if self.end_time <= self.start_time:
            raise ValueError('End time must be after start time.')
        return self


class AlternativeSlotResponse(BaseModel):
    start_time: datetime
    end_time: datetime
    verified: bool


class DurationEstimateResponse(BaseModel):
    duration_minutes: int


class NoShowRiskResponse(BaseModel):
    user_id: str
    probability: float
    high_risk: bool


def get_appointment_store() -> AppointmentStore:
    return SqlAppointmentStore(SessionLocal)


def get_audit_sink() -> AuditSink:
    return _audit_sink


def get_no_show_scorer(
    store: AppointmentStore = Depends(get_appointment_store),
    audit_sink: AuditSink = Depends(get_audit_sink),
) -> NoShowRiskScorer:
    return NoShowRiskScorer(store, audit_sink)


@router.get('/duration-estimate', response_model=DurationEstimateResponse)
async def get_duration_estimate(
    title: str = Query(..., min_length=1),
    description: str | None = Query(default=None),
    current_user: CurrentUser = Depends(get_current_user),
    store: AppointmentStore = Depends(get_appointment_store),
):
    duration_minutes = await estimate_meeting_duration(store, current_user.id, title, description)
    return DurationEstimateResponse(duration_minutes=duration_minutes)


@router.get('/no-show-risk/{user_id}', response_model=NoShowRiskResponse)
async def get_no_show_risk(
    user_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    scorer: NoShowRiskScorer = Depends(get_no_show_scorer),
):
    del current_user
    probability = await scorer.predict(user_id)
    return NoShowRiskResponse(
        user_id=user_id,
        probability=probability,
        high_risk=probability > HIGH_NO_SHOW_RISK,
    )


@router.post('/alternative-slots', response_model=list[AlternativeSlotResponse])
async def search_alternative_slots(
    data: AlternativeSlotsRequest,
    current_user: CurrentUser = Depends(get_current_user),
    store: AppointmentStore = Depends(get_appointment_store),
):
    slots = await find_alternative_slots(
        store,
        current_user.id,
        data.start_time,
        data.end_time,
        count=data.count,
    )
    return [
        AlternativeSlotResponse(start_time=slot.start, end_time=slot.end, verified=slot.verified)
        for slot in slots
    ]
