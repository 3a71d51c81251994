import enum

from roombooker.utils.errors import InvalidState


class BookingStatus(str, enum.Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


# Re-decisions are allowed; nothing goes back to Pending.
TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.APPROVED, BookingStatus.REJECTED},
    BookingStatus.APPROVED: {BookingStatus.APPROVED, BookingStatus.REJECTED},
    BookingStatus.REJECTED: {BookingStatus.APPROVED, BookingStatus.REJECTED},
}


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return target in TRANSITIONS.get(current, set())


def assert_transition(current: BookingStatus, target: BookingStatus) -> None:
    if not can_transition(current, target):
        raise InvalidState(
            f"Invalid booking transition: {current.value} -> {target.value}"
        )


def assert_editable(current: BookingStatus) -> None:
    if current is not BookingStatus.PENDING:
        raise InvalidState("Only pending bookings may be modified")
