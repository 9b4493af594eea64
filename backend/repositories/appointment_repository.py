"""
Appointment persistence.

The unique constraint on (trainer_id, starts_at) is the only guard against
double-booking; ``create`` reports a violation of it as
``UniqueConstraintViolation`` so the caller can tell it apart from every
other database failure.
"""

import logging
from collections.abc import Iterable
from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from backend.core.exceptions import RepositoryError, UniqueConstraintViolation
from backend.models.appointment import Appointment

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION_SQLSTATE = '23505'
_UNIQUE_VIOLATION_MARKERS = (
    'duplicate key value violates unique constraint',
    'unique constraint failed',
)


def is_unique_violation(exc: IntegrityError) -> bool:
    original = getattr(exc, 'orig', None)
    sqlstate = getattr(original, 'pgcode', None) or getattr(original, 'sqlstate', None)
    if sqlstate == UNIQUE_VIOLATION_SQLSTATE:
        return True

    message = str(original if original is not None else exc).lower()
    return any(marker in message for marker in _UNIQUE_VIOLATION_MARKERS)


class AppointmentRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_by_trainer_and_start_range(
        self,
        trainer_id: int,
        start: datetime,
        end: datetime,
    ) -> list[Appointment]:
        """Appointments for ``trainer_id`` with ``start <= starts_at < end``."""
        try:
            return self.db.query(Appointment).filter(
                Appointment.trainer_id == trainer_id,
                Appointment.starts_at >= start,
                Appointment.starts_at < end,
            ).order_by(Appointment.starts_at.asc()).all()
        except SQLAlchemyError as exc:
            logger.exception('Failed to fetch appointments for trainer %s', trainer_id)
            raise RepositoryError() from exc

    def find_by_trainer(self, trainer_id: int) -> list[Appointment]:
        try:
            return self.db.query(Appointment).filter(
                Appointment.trainer_id == trainer_id,
            ).order_by(Appointment.starts_at.asc()).all()
        except SQLAlchemyError as exc:
            logger.exception('Failed to fetch appointments for trainer %s', trainer_id)
            raise RepositoryError() from exc

    def create(
        self,
        trainer_id: int,
        user_id: int,
        starts_at: datetime,
        ends_at: datetime,
    ) -> Appointment:
        appointment = Appointment(
            trainer_id=trainer_id,
            user_id=user_id,
            starts_at=starts_at,
            ends_at=ends_at,
        )

        try:
            self.db.add(appointment)
            self.db.commit()
            self.db.refresh(appointment)
        except IntegrityError as exc:
            self.db.rollback()
            if is_unique_violation(exc):
                raise UniqueConstraintViolation(str(exc.orig)) from exc
            logger.exception('Unexpected integrity error creating appointment')
            raise RepositoryError() from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Failed to create appointment')
            raise RepositoryError() from exc

        return appointment

    def count(self) -> int:
        try:
            return self.db.query(Appointment).count()
        except SQLAlchemyError as exc:
            logger.exception('Failed to count appointments')
            raise RepositoryError() from exc

    def bulk_create(self, rows: Iterable[dict]) -> int:
        appointments = [Appointment(**row) for row in rows]
        try:
            self.db.add_all(appointments)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Failed to insert %d appointments', len(appointments))
            raise RepositoryError() from exc
        return len(appointments)
