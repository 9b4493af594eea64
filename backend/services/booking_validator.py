"""
Checks a proposed booking before anything is written.

The order matters: the first failing rule decides the error the caller sees.
Passing here does not mean the slot is free; that is only known once the
insert is attempted.
"""

from datetime import datetime

from backend.core.civil_time import DEFAULT_POLICY, CivilTimePolicy
from backend.core.exceptions import AlignmentError, DurationError, OutsideBusinessHoursError


def validate_booking(
    starts_at: str | None,
    ends_at: str | None,
    policy: CivilTimePolicy = DEFAULT_POLICY,
) -> tuple[datetime, datetime]:
    """Return the UTC ``(start, end)`` pair or raise the first failing rule's error."""
    start = policy.parse_timestamp(starts_at)
    end = policy.parse_timestamp(ends_at)

    if not policy.is_business_hours(start):
        raise OutsideBusinessHoursError()

    if not policy.is_slot_aligned(start):
        raise AlignmentError()

    if end - start != policy.slot_duration:
        raise DurationError()

    return start, end
