"""
Availability and booking orchestration for a single trainer.

Reads are computed fresh from the repository on every call. Writes rely on
the database's unique (trainer_id, starts_at) constraint to detect
double-bookings; nothing is read before the insert.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from backend.core.civil_time import DEFAULT_POLICY, CivilTimePolicy
from backend.core.exceptions import (
    ConflictError,
    FormatError,
    MissingParameterError,
    UniqueConstraintViolation,
)
from backend.models.appointment import Appointment
from backend.repositories.appointment_repository import AppointmentRepository
from backend.services.booking_validator import validate_booking
from backend.services.slot_generator import AvailableSlot, generate_available_slots

logger = logging.getLogger(__name__)

MISSING_AVAILABILITY_PARAMS = 'Missing required query parameters: trainer_id, starts_at, ends_at'
MISSING_TRAINER_PARAM = 'Missing required query parameters: trainer_id'

# Ids are stored in signed 64-bit columns.
MIN_ID = -(2 ** 63)
MAX_ID = 2 ** 63 - 1


@dataclass(frozen=True)
class BookedAppointment:
    id: int
    trainer_id: int
    user_id: int
    starts_at: datetime
    ends_at: datetime


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def check_id_range(value: int, name: str) -> int:
    if not MIN_ID <= value <= MAX_ID:
        raise FormatError(f'{name} must be a 64-bit integer.')
    return value


def parse_trainer_id(value: int | str) -> int:
    if isinstance(value, bool):
        raise FormatError('trainer_id must be an integer.')
    if isinstance(value, int):
        return check_id_range(value, 'trainer_id')
    try:
        parsed = int(value.strip())
    except (AttributeError, ValueError) as exc:
        raise FormatError('trainer_id must be an integer.') from exc
    return check_id_range(parsed, 'trainer_id')


class AvailabilityEngine:
    def __init__(self, repository: AppointmentRepository, policy: CivilTimePolicy = DEFAULT_POLICY):
        self.repository = repository
        self.policy = policy

    def _render(self, appointment: Appointment) -> BookedAppointment:
        return BookedAppointment(
            id=appointment.id,
            trainer_id=appointment.trainer_id,
            user_id=appointment.user_id,
            starts_at=self.policy.to_display(appointment.starts_at),
            ends_at=self.policy.to_display(appointment.ends_at),
        )

    def list_availability(
        self,
        trainer_id: int | str | None,
        starts_at: str | None,
        ends_at: str | None,
    ) -> list[AvailableSlot]:
        if _is_blank(trainer_id) or _is_blank(starts_at) or _is_blank(ends_at):
            raise MissingParameterError(MISSING_AVAILABILITY_PARAMS)

        trainer = parse_trainer_id(trainer_id)
        range_start = self.policy.parse_timestamp(starts_at)
        range_end = self.policy.parse_timestamp(ends_at)

        if range_start >= range_end:
            return []

        booked = self.repository.find_by_trainer_and_start_range(trainer, range_start, range_end)
        return generate_available_slots(
            range_start,
            range_end,
            booked=(appointment.starts_at for appointment in booked),
            policy=self.policy,
        )

    def create_booking(
        self,
        trainer_id: int,
        user_id: int,
        starts_at: str | None,
        ends_at: str | None,
    ) -> BookedAppointment:
        check_id_range(trainer_id, 'trainer_id')
        check_id_range(user_id, 'user_id')
        start, end = validate_booking(starts_at, ends_at, self.policy)

        try:
            appointment = self.repository.create(
                trainer_id=trainer_id,
                user_id=user_id,
                starts_at=start,
                ends_at=end,
            )
        except UniqueConstraintViolation as exc:
            logger.warning(
                'Rejected double-booking for trainer %s at %s',
                trainer_id,
                start.isoformat(),
            )
            raise ConflictError() from exc

        logger.info(
            'Booked appointment %s for trainer %s user %s at %s',
            appointment.id,
            trainer_id,
            user_id,
            start.isoformat(),
        )
        return self._render(appointment)

    def list_trainer_appointments(self, trainer_id: int | str | None) -> list[BookedAppointment]:
        if _is_blank(trainer_id):
            raise MissingParameterError(MISSING_TRAINER_PARAM)

        trainer = parse_trainer_id(trainer_id)
        return [self._render(appointment) for appointment in self.repository.find_by_trainer(trainer)]
