"""
Business-hours policy evaluated in a fixed civil timezone.

Callers may hand in instants carrying any offset; every decision here is
made after converting to the reference timezone, and every stored or
compared value is normalized to UTC first.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from backend.core import config
from backend.core.exceptions import FormatError

SLOT_DURATION = timedelta(minutes=30)
OPEN_HOUR = 8
CLOSE_HOUR = 17
WORKING_WEEKDAYS = frozenset({0, 1, 2, 3, 4})

_RFC3339_PATTERN = re.compile(
    r'^(?P<date>[0-9]{4}-[0-9]{2}-[0-9]{2})[Tt](?P<time>[0-9]{2}:[0-9]{2}:[0-9]{2})'
    r'(?:\.(?P<fraction>[0-9]+))?'
    r'(?P<offset>[Zz]|[+-][0-9]{2}:[0-5][0-9])$'
)
MAX_FRACTION_DIGITS = 6


@dataclass(frozen=True)
class CivilTimePolicy:
    """Working days and hours of the scheduling calendar.

    ``is_business_hours`` looks at the local hour only, so 16:45 local is
    still in hours even though a slot starting then ends after closing.
    """

    tz: ZoneInfo
    open_hour: int = OPEN_HOUR
    close_hour: int = CLOSE_HOUR
    working_weekdays: frozenset[int] = field(default=WORKING_WEEKDAYS)
    slot_duration: timedelta = SLOT_DURATION

    def _require_aware(self, instant: datetime) -> None:
        if instant.tzinfo is None or instant.utcoffset() is None:
            raise FormatError('Timestamps must include a timezone offset.')

    def to_display(self, instant: datetime) -> datetime:
        self._require_aware(instant)
        return instant.astimezone(self.tz)

    def to_reference(self, instant: datetime) -> datetime:
        self._require_aware(instant)
        return instant.astimezone(timezone.utc)

    def is_business_hours(self, instant: datetime) -> bool:
        local = self.to_display(instant)
        return (
            local.weekday() in self.working_weekdays
            and self.open_hour <= local.hour < self.close_hour
        )

    def is_slot_aligned(self, instant: datetime) -> bool:
        return self.to_display(instant).minute % 30 == 0

    def parse_timestamp(self, value: str | None) -> datetime:
        """Parse an RFC 3339 timestamp into a UTC instant.

        The offset (or ``Z``) is mandatory; anything else raises FormatError.
        Fractions finer than a microsecond are rejected unless they are zero,
        since they cannot be stored without loss.
        """
        if not isinstance(value, str):
            raise FormatError()

        match = _RFC3339_PATTERN.match(value.strip())
        if match is None:
            raise FormatError()

        fraction = match.group('fraction') or ''
        if fraction[MAX_FRACTION_DIGITS:].strip('0'):
            raise FormatError()

        offset = match.group('offset')
        if offset in ('Z', 'z'):
            offset = '+00:00'
        normalized = (
            f"{match.group('date')}T{match.group('time')}"
            f".{fraction[:MAX_FRACTION_DIGITS].ljust(MAX_FRACTION_DIGITS, '0')}{offset}"
        )

        try:
            parsed = datetime.fromisoformat(normalized).astimezone(timezone.utc)
            # Instants the reference timezone cannot represent are unusable.
            parsed.astimezone(self.tz)
        except (ValueError, OverflowError) as exc:
            raise FormatError() from exc

        return parsed


def build_policy(timezone_name: str | None = None) -> CivilTimePolicy:
    return CivilTimePolicy(tz=ZoneInfo(timezone_name or config.SCHEDULING_TIMEZONE))


DEFAULT_POLICY = build_policy()
