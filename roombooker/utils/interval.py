"""Half-open time intervals and UTC helpers.

All instants handled by the booking core are naive ``datetime`` values that
already represent UTC. Conversion from aware values happens at the request
boundary (see ``to_utc_naive``); the interval type itself never normalizes.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from roombooker.utils.errors import InvalidRange


def utcnow() -> datetime:
    """Current instant as naive UTC, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


@dataclass(frozen=True)
class TimeInterval:
    """``[start, end)``: start inclusive, end exclusive."""

    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start >= self.end:
            raise InvalidRange(
                f"End time must be after start time ({self.start} >= {self.end})"
            )

    @classmethod
    def of(cls, booking) -> "TimeInterval":
        return cls(booking.start_time, booking.end_time)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: "TimeInterval") -> bool:
        return self.start < other.end and other.start < self.end

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end
