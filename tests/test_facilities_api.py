import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from holdaspot.models import Facility, FacilityType, Sport

from helpers import booking_payload, slot


async def add_catalogue(db, sport):
    golf = Sport(name="Golf", max_booking_hours=2.0, slot_duration_minutes=30)
    db.add(golf)
    await db.flush()
    db.add_all([
        Facility(name="Driving Bay A", sport_id=golf.id, type=FacilityType.BAY),
        Facility(name="Old Court", sport_id=sport.id, type=FacilityType.COURT, is_active=False),
    ])
    await db.commit()
    return golf


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_list_sports(client, db, sport):
    await add_catalogue(db, sport)
    response = await client.get("/api/sports")
    assert response.status_code == 200
    assert [s["name"] for s in response.json()] == ["Golf", "Tennis"]


async def test_list_facilities(client, db, sport, facility, other_facility):
    golf = await add_catalogue(db, sport)

    response = await client.get("/api/facilities")
    assert response.status_code == 200
    names = [f["name"] for f in response.json()]
    # Courts before bays, inactive facilities hidden
    assert names == ["Court 1", "Court 2", "Driving Bay A"]
    assert response.json()[0]["sport"]["name"] == "Tennis"

    response = await client.get("/api/facilities", params={"type": "bay"})
    assert [f["name"] for f in response.json()] == ["Driving Bay A"]

    response = await client.get("/api/facilities", params={"sport_id": str(golf.id)})
    assert [f["name"] for f in response.json()] == ["Driving Bay A"]

    response = await client.get("/api/facilities", params={"search": "court 2"})
    assert [f["name"] for f in response.json()] == ["Court 2"]


async def test_list_facilities_rejects_bad_filters(client):
    response = await client.get("/api/facilities", params={"type": "pool"})
    assert response.status_code == 400
    assert response.json()["error"] == 'Invalid facility type. Must be one of "court", "bay"'

    response = await client.get("/api/facilities", params={"sport_id": "tennis"})
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid sport ID format"


async def test_get_facility(client, db, sport, facility):
    response = await client.get(f"/api/facilities/{facility.id}")
    assert response.status_code == 200
    assert response.json()["type"] == "court"

    response = await client.get(f"/api/facilities/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json()["error"] == "Facility not found"

    facility.is_active = False
    await db.commit()
    response = await client.get(f"/api/facilities/{facility.id}")
    assert response.status_code == 404


async def test_slot_grid_marks_booked_slots(client, user, facility, next_week):
    start, end = slot(next_week, 1, 10, 1)
    booked = await client.post("/api/reservations", json=booking_payload(user.id, facility.id, start, end))
    reservation_id = booked.json()["reservation"]["id"]

    response = await client.get(f"/api/facilities/{facility.id}/slots", params={"date": start.date().isoformat()})
    assert response.status_code == 200
    body = response.json()
    assert body["day"] == start.date().isoformat()
    assert body["timezone"] == "UTC"
    assert body["slot_duration_minutes"] == 30
    assert len(body["slots"]) == 32

    taken = [s for s in body["slots"] if not s["available"]]
    assert len(taken) == 2
    assert all(s["reservation_id"] == reservation_id for s in taken)
    assert datetime.fromisoformat(taken[0]["start_time"].replace("Z", "+00:00")) == start
    assert not any(s["is_past"] for s in body["slots"])


async def test_slot_grid_for_past_day(client, facility):
    response = await client.get(f"/api/facilities/{facility.id}/slots", params={"date": "2020-01-06"})
    assert response.status_code == 200
    slots = response.json()["slots"]
    assert all(s["is_past"] for s in slots)
    assert all(s["available"] for s in slots)


async def test_slot_grid_rejects_bad_date(client, facility):
    response = await client.get(f"/api/facilities/{facility.id}/slots", params={"date": "tomorrow"})
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid date format"

    response = await client.get(f"/api/facilities/{uuid.uuid4()}/slots")
    assert response.status_code == 404


async def test_slot_grid_defaults_to_today(client, facility):
    response = await client.get(f"/api/facilities/{facility.id}/slots")
    assert response.status_code == 200
    assert response.json()["day"] == datetime.now(timezone.utc).date().isoformat()


async def test_grid_slots_of_longer_sports_are_bookable(client, db, user, next_week):
    squash = Sport(name="Squash", max_booking_hours=2.0, slot_duration_minutes=60)
    db.add(squash)
    await db.flush()
    court = Facility(name="Squash Court", sport_id=squash.id, type=FacilityType.COURT)
    db.add(court)
    await db.commit()

    day = (next_week + timedelta(days=1)).date().isoformat()
    response = await client.get(f"/api/facilities/{court.id}/slots", params={"date": day})
    body = response.json()
    assert body["slot_duration_minutes"] == 60
    assert len(body["slots"]) == 16

    first = body["slots"][0]
    response = await client.post(
        "/api/reservations",
        json={
            "user_id": str(user.id),
            "facility_id": str(court.id),
            "start_time": first["start_time"],
            "end_time": first["end_time"],
        },
    )
    assert response.status_code == 201
    assert response.json()["reservation"]["credits_used"] == 2

    response = await client.get(f"/api/facilities/{court.id}/slots", params={"date": day})
    assert response.json()["slots"][0]["available"] is False


@pytest.mark.parametrize("minutes", [0, 45, -30])
async def test_sport_slot_length_must_be_whole_credits(db, minutes):
    db.add(Sport(name="Padel", slot_duration_minutes=minutes))
    with pytest.raises(IntegrityError):
        await db.commit()
    await db.rollback()
