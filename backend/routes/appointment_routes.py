from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.dependencies import require_service_token
from backend.core.exceptions import MissingParameterError, SchedulingError
from backend.database import ensure_appointment_schema, get_db
from backend.repositories.appointment_repository import AppointmentRepository
from backend.services.availability_engine import (
    MAX_ID,
    MIN_ID,
    MISSING_TRAINER_PARAM,
    AvailabilityEngine,
    BookedAppointment,
)

router = APIRouter(tags=['appointments'], dependencies=[Depends(require_service_token)])


class CreateAppointmentRequest(BaseModel):
    trainer_id: int = Field(ge=MIN_ID, le=MAX_ID)
    user_id: int = Field(ge=MIN_ID, le=MAX_ID)
    starts_at: str
    ends_at: str


class AvailableSlotResponse(BaseModel):
    starts_at: datetime
    ends_at: datetime


class AppointmentResponse(BaseModel):
    id: int
    starts_at: datetime
    ends_at: datetime
    trainer_id: int
    user_id: int


def ensure_database_ready() -> None:
    try:
        ensure_appointment_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Database unavailable. Verify DATABASE_URL and database credentials.',
        ) from exc


def get_engine(db: Session = Depends(get_db)) -> AvailabilityEngine:
    return AvailabilityEngine(AppointmentRepository(db))


def to_appointment_response(appointment: BookedAppointment) -> AppointmentResponse:
    return AppointmentResponse(
        id=appointment.id,
        starts_at=appointment.starts_at,
        ends_at=appointment.ends_at,
        trainer_id=appointment.trainer_id,
        user_id=appointment.user_id,
    )


@router.get('', response_model=list[AvailableSlotResponse])
def list_available_appointments(
    trainer_id: str | None = Query(default=None),
    starts_at: str | None = Query(default=None),
    ends_at: str | None = Query(default=None),
    engine: AvailabilityEngine = Depends(get_engine),
):
    ensure_database_ready()

    try:
        slots = engine.list_availability(trainer_id, starts_at, ends_at)
    except SchedulingError as exc:
        raise exc.to_http_exception() from exc

    return [AvailableSlotResponse(starts_at=slot.starts_at, ends_at=slot.ends_at) for slot in slots]


@router.post('', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(data: CreateAppointmentRequest, engine: AvailabilityEngine = Depends(get_engine)):
    ensure_database_ready()

    try:
        appointment = engine.create_booking(
            trainer_id=data.trainer_id,
            user_id=data.user_id,
            starts_at=data.starts_at,
            ends_at=data.ends_at,
        )
    except SchedulingError as exc:
        raise exc.to_http_exception() from exc

    return to_appointment_response(appointment)


@router.get('/trainer', include_in_schema=False)
@router.get('/trainer/', include_in_schema=False)
def list_scheduled_appointments_without_trainer():
    raise MissingParameterError(MISSING_TRAINER_PARAM).to_http_exception()


@router.get('/trainer/{trainer_id}', response_model=list[AppointmentResponse])
def list_scheduled_appointments(trainer_id: str, engine: AvailabilityEngine = Depends(get_engine)):
    ensure_database_ready()

    try:
        appointments = engine.list_trainer_appointments(trainer_id)
    except SchedulingError as exc:
        raise exc.to_http_exception() from exc

    return [to_appointment_response(appointment) for appointment in appointments]
