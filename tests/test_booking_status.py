import pytest

from roombooker.utils.booking_status import (
    BookingStatus,
    assert_editable,
    assert_transition,
    can_transition,
)
from roombooker.utils.errors import InvalidState

PENDING = BookingStatus.PENDING
APPROVED = BookingStatus.APPROVED
REJECTED = BookingStatus.REJECTED


@pytest.mark.parametrize(
    "current, target",
    [
        (PENDING, APPROVED),
        (PENDING, REJECTED),
        (APPROVED, REJECTED),
        (REJECTED, APPROVED),
    ],
)
def test_decisions_are_allowed(current, target):
    assert can_transition(current, target)
    assert_transition(current, target)


@pytest.mark.parametrize("current", list(BookingStatus))
def test_nothing_returns_to_pending(current):
    assert not can_transition(current, PENDING)
    with pytest.raises(InvalidState):
        assert_transition(current, PENDING)


def test_only_pending_is_editable():
    assert_editable(PENDING)
    for status in (APPROVED, REJECTED):
        with pytest.raises(InvalidState, match="Only pending bookings may be modified"):
            assert_editable(status)
