import pytest
from fastapi import status

from roombooker.models.booking import Booking
from roombooker.utils.booking_status import BookingStatus

from tests.conf_tests import (
    DAY,
    at,
    client,
    clear_db,
    test_db,
    test_room,
    auth_headers,
    admin_headers,
    lifecycle,
    make_booking,
)

# Test data
TEST_BOOKING_DATA = {
    "booker_name": "Siti Rahma",
    "booker_email": "siti@example.com",
    "booker_phone": "+62 812 0000 0000",
    "purpose": "Team Meeting",
}


def booking_payload(room_id, start, end, **overrides):
    data = dict(TEST_BOOKING_DATA, room_id=room_id, start_time=start.isoformat(), end_time=end.isoformat())
    data.update(overrides)
    return data


# Fixtures
@pytest.fixture
def test_booking(lifecycle, test_room):  # pylint: disable=redefined-outer-name
    return make_booking(lifecycle, test_room, at(9), at(12))


# Tests
# pylint: disable-next=redefined-outer-name
def test_create_booking_success(auth_headers, test_room):
    response = client.post(
        "/bookings/", json=booking_payload(test_room.id, at(9), at(10)), headers=auth_headers
    )
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["room_id"] == test_room.id
    assert data["purpose"] == TEST_BOOKING_DATA["purpose"]
    assert data["status"] == "Pending"
    assert data["start_time"] == at(9).isoformat()
    assert data["end_time"] == at(10).isoformat()


# pylint: disable-next=redefined-outer-name
def test_create_booking_converts_to_utc(auth_headers, test_room):
    payload = booking_payload(test_room.id, at(9), at(10))
    payload["start_time"] = "2030-01-07T16:00:00+07:00"
    payload["end_time"] = "2030-01-07T17:00:00+07:00"
    response = client.post("/bookings/", json=payload, headers=auth_headers)
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["start_time"] == at(9).isoformat()


# pylint: disable-next=redefined-outer-name
def test_create_booking_unauthorized(test_room):
    response = client.post("/bookings/", json=booking_payload(test_room.id, at(9), at(10)))
    assert response.status_code in [
        status.HTTP_401_UNAUTHORIZED,
        status.HTTP_403_FORBIDDEN,
    ]


# pylint: disable-next=redefined-outer-name
def test_create_booking_invalid_range(auth_headers, test_room):
    response = client.post(
        "/bookings/", json=booking_payload(test_room.id, at(10), at(9)), headers=auth_headers
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "End time must be after start time" in response.json()["detail"]


# pylint: disable-next=redefined-outer-name
def test_create_booking_invalid_email(auth_headers, test_room):
    response = client.post(
        "/bookings/",
        json=booking_payload(test_room.id, at(9), at(10), booker_email="not-an-email"),
        headers=auth_headers,
    )
    assert response.status_code == 422


# pylint: disable-next=redefined-outer-name
def test_create_booking_room_not_found(auth_headers):
    response = client.post("/bookings/", json=booking_payload(999, at(9), at(10)), headers=auth_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert "Room not found" in response.json()["detail"]


# pylint: disable-next=redefined-outer-name
def test_create_booking_overlapping_pending_is_allowed(auth_headers, test_room, test_booking):
    response = client.post(
        "/bookings/", json=booking_payload(test_room.id, at(11), at(13)), headers=auth_headers
    )
    assert response.status_code == status.HTTP_201_CREATED


# pylint: disable-next=redefined-outer-name
def test_create_booking_overlapping_approved(auth_headers, test_room, test_booking, lifecycle):
    lifecycle.decide(test_booking.id, BookingStatus.APPROVED)
    response = client.post(
        "/bookings/", json=booking_payload(test_room.id, at(11), at(13)), headers=auth_headers
    )
    assert response.status_code == status.HTTP_409_CONFLICT
    assert "already booked" in response.json()["detail"]


# pylint: disable-next=redefined-outer-name
def test_get_bookings(auth_headers, test_booking):
    response = client.get("/bookings/", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert len(data) == 1
    assert data[0]["id"] == test_booking.id
    assert response.headers["X-Total-Count"] == "1"


# pylint: disable-next=redefined-outer-name
def test_get_bookings_filtered_by_status(auth_headers, test_booking):
    response = client.get("/bookings/?status=Approved", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == []


# pylint: disable-next=redefined-outer-name
def test_get_booking(test_booking, test_room):
    response = client.get(f"/bookings/{test_booking.id}")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["id"] == test_booking.id
    assert data["room"]["id"] == test_room.id
    assert data["room"]["name"] == test_room.name


def test_get_booking_not_found():
    response = client.get("/bookings/999")
    assert response.status_code == status.HTTP_404_NOT_FOUND


# pylint: disable-next=redefined-outer-name
def test_update_booking_partial(auth_headers, test_booking):
    response = client.put(
        f"/bookings/{test_booking.id}", json={"purpose": "Sprint Review"}, headers=auth_headers
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["purpose"] == "Sprint Review"
    assert data["booker_name"] == test_booking.booker_name
    assert data["start_time"] == at(9).isoformat()


# pylint: disable-next=redefined-outer-name
def test_update_booking_unauthorized(test_booking):
    response = client.put(f"/bookings/{test_booking.id}", json={"purpose": "Should Fail"})
    assert response.status_code in [
        status.HTTP_401_UNAUTHORIZED,
        status.HTTP_403_FORBIDDEN,
    ]


# pylint: disable-next=redefined-outer-name
def test_update_approved_booking_conflicts(auth_headers, test_booking, lifecycle):
    lifecycle.decide(test_booking.id, BookingStatus.APPROVED)
    response = client.put(
        f"/bookings/{test_booking.id}", json={"purpose": "Too late"}, headers=auth_headers
    )
    assert response.status_code == status.HTTP_409_CONFLICT
    assert "Only pending bookings may be modified" in response.json()["detail"]


# pylint: disable-next=redefined-outer-name
def test_decide_requires_admin(auth_headers, test_booking):
    response = client.patch(
        f"/bookings/{test_booking.id}/status", json={"status": "Approved"}, headers=auth_headers
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


# pylint: disable-next=redefined-outer-name
def test_approve_then_slot_taken(admin_headers, auth_headers, test_room, test_booking):
    other = client.post(
        "/bookings/", json=booking_payload(test_room.id, at(11), at(13)), headers=auth_headers
    ).json()

    response = client.patch(
        f"/bookings/{test_booking.id}/status", json={"status": "Approved"}, headers=admin_headers
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "Approved"

    response = client.patch(
        f"/bookings/{other['id']}/status", json={"status": "Approved"}, headers=admin_headers
    )
    assert response.status_code == status.HTTP_409_CONFLICT


# pylint: disable-next=redefined-outer-name
def test_reject_without_reason(admin_headers, test_booking):
    response = client.patch(
        f"/bookings/{test_booking.id}/status", json={"status": "Rejected"}, headers=admin_headers
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Rejection reason is required"


# pylint: disable-next=redefined-outer-name
def test_reject_with_reason(admin_headers, test_booking):
    response = client.patch(
        f"/bookings/{test_booking.id}/status",
        json={"status": "Rejected", "rejection_reason": "Ruangan dipakai rapat pimpinan"},
        headers=admin_headers,
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "Rejected"
    assert data["rejection_reason"] == "Ruangan dipakai rapat pimpinan"


# pylint: disable-next=redefined-outer-name
def test_delete_booking_is_soft(admin_headers, auth_headers, test_db, test_booking):
    response = client.delete(f"/bookings/{test_booking.id}", headers=admin_headers)
    assert response.status_code == status.HTTP_204_NO_CONTENT

    assert client.get(f"/bookings/{test_booking.id}").status_code == status.HTTP_404_NOT_FOUND
    assert client.get("/bookings/", headers=auth_headers).json() == []
    assert client.delete(f"/bookings/{test_booking.id}", headers=admin_headers).status_code == status.HTTP_404_NOT_FOUND

    test_db.expire_all()
    row = test_db.query(Booking).filter(Booking.id == test_booking.id).one()
    assert row.deleted_at is not None


# pylint: disable-next=redefined-outer-name
def test_delete_booking_requires_admin(auth_headers, test_booking):
    response = client.delete(f"/bookings/{test_booking.id}", headers=auth_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN


# pylint: disable-next=redefined-outer-name
def test_booking_history(auth_headers, test_booking):
    response = client.get("/bookings/history?email=budi@example.com", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert [b["id"] for b in response.json()] == [test_booking.id]


# pylint: disable-next=redefined-outer-name
def test_room_schedule(lifecycle, test_room, test_booking):
    later = make_booking(lifecycle, test_room, at(14), at(15))
    response = client.get(f"/bookings/room/{test_room.id}")
    assert response.status_code == status.HTTP_200_OK
    assert [b["id"] for b in response.json()] == [test_booking.id, later.id]

    response = client.get(
        f"/bookings/room/{test_room.id}",
        params={"start_time": at(13).isoformat(), "end_time": at(16).isoformat()},
    )
    assert [b["id"] for b in response.json()] == [later.id]

    response = client.get(f"/bookings/room/{test_room.id}", params={"end_time": at(16).isoformat()})
    assert response.status_code == status.HTTP_400_BAD_REQUEST


# pylint: disable-next=redefined-outer-name
def test_get_available_slots(auth_headers, test_room, test_booking, lifecycle):
    lifecycle.decide(test_booking.id, BookingStatus.APPROVED)
    make_booking(lifecycle, test_room, at(14), at(15))  # pending, leaves the slot open

    response = client.get(
        f"/bookings/available_slots/?room_id={test_room.id}&date={DAY.date()}",
        headers=auth_headers,
    )
    assert response.status_code == status.HTTP_200_OK
    starts = [slot["start_time"] for slot in response.json()]
    assert starts == [at(h).isoformat() for h in (8, 12, 13, 14, 15, 16, 17)]


# pylint: disable-next=redefined-outer-name
def test_get_available_slots_bad_duration(auth_headers, test_room):
    response = client.get(
        f"/bookings/available_slots/?room_id={test_room.id}&date={DAY.date()}&duration=0",
        headers=auth_headers,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
