"""Load the initial appointment data into an empty database.

Usage:
    python -m backend.seed [path/to/seed.json]
"""
import json
import logging
import os
import sys

from sqlalchemy.orm import Session

from backend.core import config
from backend.core.civil_time import DEFAULT_POLICY, CivilTimePolicy
from backend.core.exceptions import FormatError
from backend.repositories.appointment_repository import AppointmentRepository

logger = logging.getLogger(__name__)


def parse_seed_records(records: list, policy: CivilTimePolicy = DEFAULT_POLICY) -> list[dict]:
    if not isinstance(records, list):
        raise ValueError('Seed data must be a JSON array of appointments.')

    rows = []
    for index, record in enumerate(records):
        try:
            rows.append({
                'trainer_id': int(record['trainer_id']),
                'user_id': int(record['user_id']),
                'starts_at': policy.parse_timestamp(record['started_at']),
                'ends_at': policy.parse_timestamp(record['ended_at']),
            })
        except (KeyError, TypeError, ValueError, FormatError) as exc:
            raise ValueError(f'Invalid seed record at index {index}: {record!r}') from exc

    return rows


def seed_database(db: Session, path: str | None = None) -> int:
    """Insert seed appointments unless the table already has rows.

    Returns the number of inserted appointments.
    """
    seed_path = path or config.SEED_PATH
    repository = AppointmentRepository(db)

    if repository.count() > 0:
        logger.info('Database already contains data, skipping seed')
        return 0

    if not os.path.exists(seed_path):
        logger.info('No seed file at %s, skipping seed', seed_path)
        return 0

    with open(seed_path, encoding='utf-8') as seed_file:
        rows = parse_seed_records(json.load(seed_file))

    inserted = repository.bulk_create(rows)
    logger.info('Seeded %d appointments from %s', inserted, seed_path)
    return inserted


def main() -> None:
    from backend.database import SessionLocal, engine
    from backend.models.appointment import Appointment

    logging.basicConfig(level=config.LOG_LEVEL)
    Appointment.__table__.create(bind=engine, checkfirst=True)

    db = SessionLocal()
    try:
        inserted = seed_database(db, sys.argv[1] if len(sys.argv) > 1 else None)
    finally:
        db.close()
    print(f'Inserted {inserted} appointments.')


if __name__ == '__main__':
    main()
