import logging
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from backend.core.exceptions import RepositoryError, UniqueConstraintViolation
from backend.models.appointment import Appointment
from backend.repositories.appointment_repository import AppointmentRepository, is_unique_violation

NINE_AM_PT = datetime(2019, 1, 24, 17, 0, tzinfo=timezone.utc)


def _create(repository: AppointmentRepository, trainer_id: int, starts_at: datetime, user_id: int = 100) -> Appointment:
    return repository.create(
        trainer_id=trainer_id,
        user_id=user_id,
        starts_at=starts_at,
        ends_at=starts_at + timedelta(minutes=30),
    )


def test_create_assigns_id_and_reads_back_utc(appointment_db) -> None:
    repository = AppointmentRepository(appointment_db)

    appointment = _create(repository, 1, NINE_AM_PT)

    assert appointment.id is not None
    stored = appointment_db.query(Appointment).filter(Appointment.id == appointment.id).one()
    appointment_db.refresh(stored)
    assert stored.starts_at == NINE_AM_PT
    assert stored.starts_at.utcoffset() == timedelta(0)


def test_create_raises_unique_violation_for_same_trainer_and_start(appointment_db) -> None:
    repository = AppointmentRepository(appointment_db)
    _create(repository, 1, NINE_AM_PT)

    with pytest.raises(UniqueConstraintViolation):
        _create(repository, 1, NINE_AM_PT, user_id=200)

    assert repository.count() == 1


def test_same_start_for_another_trainer_is_allowed(appointment_db) -> None:
    repository = AppointmentRepository(appointment_db)
    _create(repository, 1, NINE_AM_PT)

    _create(repository, 2, NINE_AM_PT)

    assert repository.count() == 2


def test_find_by_trainer_and_start_range_is_half_open(appointment_db) -> None:
    repository = AppointmentRepository(appointment_db)
    _create(repository, 1, NINE_AM_PT)
    _create(repository, 1, NINE_AM_PT + timedelta(hours=1))
    _create(repository, 2, NINE_AM_PT)

    found = repository.find_by_trainer_and_start_range(1, NINE_AM_PT, NINE_AM_PT + timedelta(hours=1))

    assert [appointment.starts_at for appointment in found] == [NINE_AM_PT]


def test_find_by_trainer_returns_all_in_start_order(appointment_db) -> None:
    repository = AppointmentRepository(appointment_db)
    _create(repository, 1, NINE_AM_PT + timedelta(days=1))
    _create(repository, 1, NINE_AM_PT)
    _create(repository, 3, NINE_AM_PT)

    found = repository.find_by_trainer(1)

    assert [appointment.starts_at for appointment in found] == [NINE_AM_PT, NINE_AM_PT + timedelta(days=1)]


def test_read_failures_become_repository_errors(appointment_db, monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_query(*_args, **_kwargs):
        raise OperationalError('SELECT', {}, Exception('connection refused'))

    monkeypatch.setattr(appointment_db, 'query', broken_query)

    with pytest.raises(RepositoryError):
        AppointmentRepository(appointment_db).find_by_trainer(1)


def test_other_integrity_errors_are_not_conflicts(appointment_db) -> None:
    repository = AppointmentRepository(appointment_db)

    with pytest.raises(RepositoryError):
        repository.create(trainer_id=1, user_id=None, starts_at=NINE_AM_PT, ends_at=NINE_AM_PT)


@pytest.mark.parametrize(
    ('orig', 'expected'),
    [
        (SimpleNamespace(pgcode='23505'), True),
        (Exception('duplicate key value violates unique constraint "uq_appointments_trainer_starts_at"'), True),
        (Exception('UNIQUE constraint failed: appointments.trainer_id, appointments.starts_at'), True),
        (Exception('NOT NULL constraint failed: appointments.user_id'), False),
    ],
)
def test_is_unique_violation(orig, expected: bool) -> None:
    assert is_unique_violation(IntegrityError('INSERT', {}, orig)) is expected


def test_count_failure_is_logged_and_wrapped(appointment_db, monkeypatch: pytest.MonkeyPatch, caplog) -> None:
    def broken_query(*_args, **_kwargs):
        raise OperationalError('SELECT', {}, Exception('connection refused'))

    monkeypatch.setattr(appointment_db, 'query', broken_query)

    with caplog.at_level(logging.ERROR, logger='backend.repositories.appointment_repository'):
        with pytest.raises(RepositoryError):
            AppointmentRepository(appointment_db).count()

    assert 'Failed to count appointments' in caplog.text
