from roombooker.utils.errors import InvalidRange
from roombooker.utils.interval import TimeInterval, to_utc_naive


def normalize_instant(value):
    """Convert an aware datetime to naive UTC; naive values are taken as UTC."""
    if value is None:
        return value
    return to_utc_naive(value)


def strip_required(value):
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


def query_window(start_time, end_time):
    """Window from optional query bounds; both or neither must be given."""
    if start_time is None and end_time is None:
        return None
    if start_time is None or end_time is None:
        raise InvalidRange("start_time and end_time must be given together")
    return TimeInterval(normalize_instant(start_time), normalize_instant(end_time))
