from datetime import date, datetime, time, timedelta
from typing import Iterable, Iterator, Tuple

from roombooker.utils.interval import TimeInterval

OPENING_HOUR = 8
CLOSING_HOUR = 18


def business_day(day: date) -> TimeInterval:
    """Bookable hours of ``day`` (08:00 to 18:00 UTC)."""
    midnight = datetime.combine(day, time.min)
    return TimeInterval(
        midnight + timedelta(hours=OPENING_HOUR),
        midnight + timedelta(hours=CLOSING_HOUR),
    )


def iter_free_slots(
    bookings: Iterable, day: TimeInterval, duration: timedelta
) -> Iterator[Tuple[datetime, datetime]]:
    """
    Yield back-to-back free slots of ``duration`` inside ``day``.

    ``bookings`` must be ordered by start time; anything they cover,
    including parts sticking out of ``day``, is skipped.
    """
    if duration <= timedelta(0):
        raise ValueError("Duration must be positive")

    current_time = day.start
    for booking in bookings:
        # Add slots before the current booking
        while current_time + duration <= min(booking.start_time, day.end):
            slot_end = current_time + duration
            yield current_time, slot_end
            current_time = slot_end
        current_time = max(current_time, booking.end_time)

    # Add slots after the last booking
    while current_time + duration <= day.end:
        slot_end = current_time + duration
        yield current_time, slot_end
        current_time = slot_end
