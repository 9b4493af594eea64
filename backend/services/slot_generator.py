from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from backend.core.civil_time import DEFAULT_POLICY, CivilTimePolicy


@dataclass(frozen=True)
class AvailableSlot:
    starts_at: datetime
    ends_at: datetime


def iterate_slot_starts(range_start: datetime, range_end: datetime, policy: CivilTimePolicy = DEFAULT_POLICY):
    """Yield UTC cursors from ``range_start`` in slot-sized steps, ending before ``range_end``.

    The grid is anchored on ``range_start`` as given; it is not snapped to the
    half hour.
    """
    current = policy.to_reference(range_start)
    end = policy.to_reference(range_end)

    while current < end:
        yield current
        try:
            current += policy.slot_duration
        except OverflowError:
            return


def generate_available_slots(
    range_start: datetime,
    range_end: datetime,
    booked: Iterable[datetime] = (),
    policy: CivilTimePolicy = DEFAULT_POLICY,
) -> list[AvailableSlot]:
    booked_starts = {policy.to_reference(booked_start) for booked_start in booked}

    available: list[AvailableSlot] = []
    for current in iterate_slot_starts(range_start, range_end, policy):
        if policy.is_business_hours(current) and current not in booked_starts:
            try:
                slot = AvailableSlot(
                    starts_at=policy.to_display(current),
                    ends_at=policy.to_display(current + policy.slot_duration),
                )
            except OverflowError:
                # Slot would end past the last representable instant.
                break
            available.append(slot)

    return available
