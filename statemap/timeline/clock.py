"""
Clock Normalization — Calendar Fields to Epoch Nanoseconds

Every timestamp entering a TimelineStore is collapsed to a single u64:
nanoseconds since 1970-01-01T00:00:00 UTC, on the proleptic Gregorian
calendar.

    epoch_nanos = epoch_seconds(Y, M, D, h, m, s) * 1_000_000_000 + ns

Calendar fields are validated by constructing a real datetime, so an
impossible date (day 32, month 13, hour 24) raises InvalidTimestamp
instead of rolling over into the next unit.
"""

from datetime import datetime, timedelta, timezone
from typing import Union

from pydantic import BaseModel, ConfigDict

from ..errors import InvalidTimestamp
from ..records.schemas import NANOS_PER_SECOND, U64_MAX

_EPOCH = datetime(1970, 1, 1)
_ONE_SECOND = timedelta(seconds=1)


class CalendarTime(BaseModel):
    """
    Broken-down UTC time with nanosecond precision.

    datetime stops at microseconds; use this when the source clock is
    finer than that. Fields are stored as given and only checked when
    the value is converted.
    """
    model_config = ConfigDict(frozen=True)

    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: int = 0
    nanosecond: int = 0

    @classmethod
    def from_datetime(cls, dt: datetime) -> "CalendarTime":
        """Read the wall-clock fields of dt; aware values are shifted to UTC first."""
        if dt.tzinfo is not None:
            dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
        return cls(
            year=dt.year,
            month=dt.month,
            day=dt.day,
            hour=dt.hour,
            minute=dt.minute,
            second=dt.second,
            nanosecond=dt.microsecond * 1000,
        )


Timestamp = Union[datetime, CalendarTime]


def to_epoch_nanos(value: Timestamp) -> int:
    """
    Convert a timestamp to absolute nanoseconds since the Unix epoch.

    Aware datetimes are converted to UTC before their fields are read, so a
    non-UTC input yields a different offset than taking its wall-clock
    fields verbatim would.

    Args:
        value: A datetime (naive values are read as UTC) or CalendarTime.

    Returns:
        Nanoseconds since 1970-01-01T00:00:00 UTC.

    Raises:
        InvalidTimestamp: If the fields do not form a valid date/time, the
            nanosecond component is out of range, or the result does not
            fit an unsigned 64-bit clock.
    """
    if isinstance(value, CalendarTime):
        fields = value
    elif isinstance(value, datetime):
        try:
            fields = CalendarTime.from_datetime(value)
        except OverflowError as exc:
            raise InvalidTimestamp(f"Cannot normalize {value!r} to UTC: {exc}") from exc
    else:
        raise InvalidTimestamp(f"Unsupported timestamp type: {type(value).__name__}")

    try:
        wall = datetime(
            fields.year, fields.month, fields.day,
            fields.hour, fields.minute, fields.second,
        )
    except (ValueError, OverflowError) as exc:
        raise InvalidTimestamp(f"Invalid calendar time {value!r}: {exc}") from exc

    if not 0 <= fields.nanosecond < NANOS_PER_SECOND:
        raise InvalidTimestamp(f"Nanosecond component out of range: {fields.nanosecond}")

    seconds = (wall - _EPOCH) // _ONE_SECOND
    nanos = seconds * NANOS_PER_SECOND + fields.nanosecond

    if not 0 <= nanos <= U64_MAX:
        raise InvalidTimestamp(f"Timestamp {wall.isoformat()} is outside the u64 nanosecond range")
    return nanos

