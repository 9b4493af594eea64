"""Appointment model definitions."""

from sqlalchemy import BigInteger, Column, DateTime, Index, Integer, UniqueConstraint, func
from backend.database import Base
from backend.models.types import UTCDateTime


class Appointment(Base):
    """A booked 30-minute slot with a trainer."""
    __tablename__ = "appointments"
    __table_args__ = (
        UniqueConstraint("trainer_id", "starts_at", name="uq_appointments_trainer_starts_at"),
        Index("idx_appointments_trainer_id", "trainer_id"),
    )

    id = Column(Integer, primary_key=True)
    trainer_id = Column(BigInteger, nullable=False)
    user_id = Column(BigInteger, nullable=False)
    starts_at = Column(UTCDateTime, nullable=False)
    ends_at = Column(UTCDateTime, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
