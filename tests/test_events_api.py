from datetime import datetime
from decimal import Decimal

from conftest import ADMIN_HEADERS, booking_payload


def event_body(**overrides):
    body = {
        "title": "Jazz Night",
        "description": "Quartet live",
        "location": "Blue Hall, Bengaluru",
        "date": "2026-11-20T19:00:00",
        "total_seats": 100,
        "price": "250.00",
    }
    body.update(overrides)
    return body


async def test_create_event_defaults_available_to_total(client):
    r = await client.post("/api/events", json=event_body(), headers=ADMIN_HEADERS)

    assert r.status_code == 201
    event = r.json()
    assert event["available_seats"] == 100
    assert Decimal(event["price"]) == Decimal("250.00")

    fetched = await client.get(f"/api/events/{event['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["title"] == "Jazz Night"


async def test_create_event_requires_admin(client):
    r = await client.post("/api/events", json=event_body())
    assert r.status_code == 401
    assert r.json()["error"] == "admin_required"

    r = await client.post("/api/events", json=event_body(), headers={"X-Admin-Key": "wrong"})
    assert r.status_code == 401


async def test_create_event_validation(client):
    r = await client.post("/api/events", json=event_body(total_seats=0), headers=ADMIN_HEADERS)
    assert r.status_code == 400

    r = await client.post("/api/events", json=event_body(price="-1"), headers=ADMIN_HEADERS)
    assert r.status_code == 400

    r = await client.post("/api/events", json=event_body(total_seats=5, available_seats=6), headers=ADMIN_HEADERS)
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_seat_counts"


async def test_get_missing_event(client):
    r = await client.get("/api/events/12345")
    assert r.status_code == 404

    assert (await client.get("/api/events/0")).status_code == 400


async def test_list_filters(client, make_event):
    await make_event(title="Jazz Night", location="Blue Hall", date=datetime(2026, 11, 20, 19, 0),
                     description="smooth")
    await make_event(title="Rock Fest", location="Open Grounds", date=datetime(2026, 11, 21, 18, 0),
                     description="loud jazz-free zone")
    await make_event(title="Poetry Slam", location="Blue Hall Annex", date=datetime(2026, 12, 1, 20, 0))

    everything = (await client.get("/api/events")).json()
    assert [e["title"] for e in everything] == ["Jazz Night", "Rock Fest", "Poetry Slam"]

    by_text = (await client.get("/api/events", params={"q": "jazz"})).json()
    assert [e["title"] for e in by_text] == ["Jazz Night", "Rock Fest"]

    by_location = (await client.get("/api/events", params={"location": "blue hall"})).json()
    assert [e["title"] for e in by_location] == ["Jazz Night", "Poetry Slam"]

    by_date = (await client.get("/api/events", params={"date": "2026-11-21"})).json()
    assert [e["title"] for e in by_date] == ["Rock Fest"]

    combined = (await client.get("/api/events", params={"q": "jazz", "location": "blue"})).json()
    assert [e["title"] for e in combined] == ["Jazz Night"]


async def test_update_is_field_wise(client, make_event):
    event_id = await make_event(total_seats=10, price="20.00")
    await client.post("/api/bookings", json=booking_payload(event_id, quantity=4))

    r = await client.put(f"/api/events/{event_id}", json={"title": "Jazz Night II", "price": "30.00"},
                         headers=ADMIN_HEADERS)

    assert r.status_code == 200
    event = r.json()
    assert event["title"] == "Jazz Night II"
    assert Decimal(event["price"]) == Decimal("30.00")
    assert event["location"] == "Blue Hall"
    assert event["available_seats"] == 6


async def test_update_total_seats_leaves_available_alone(client, make_event):
    event_id = await make_event(total_seats=10, available_seats=8)

    r = await client.put(f"/api/events/{event_id}", json={"total_seats": 20}, headers=ADMIN_HEADERS)

    assert r.status_code == 200
    assert (r.json()["total_seats"], r.json()["available_seats"]) == (20, 8)

    r = await client.put(f"/api/events/{event_id}", json={"total_seats": 5}, headers=ADMIN_HEADERS)
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_seat_counts"


async def test_update_errors(client, make_event):
    event_id = await make_event()

    r = await client.put(f"/api/events/{event_id}", json={}, headers=ADMIN_HEADERS)
    assert r.status_code == 400
    assert r.json()["error"] == "no_fields"

    r = await client.put("/api/events/999", json={"title": "Ghost"}, headers=ADMIN_HEADERS)
    assert r.status_code == 404

    r = await client.put(f"/api/events/{event_id}", json={"title": "Nope"})
    assert r.status_code == 401


async def test_delete_cascades_bookings(client, make_event):
    event_id = await make_event()
    other_id = await make_event(title="Other")
    await client.post("/api/bookings", json=booking_payload(event_id, quantity=2))
    await client.post("/api/bookings", json=booking_payload(other_id, quantity=1))

    r = await client.delete(f"/api/events/{event_id}", headers=ADMIN_HEADERS)

    assert r.status_code == 200
    assert r.json() == {"success": True}
    assert (await client.get(f"/api/events/{event_id}")).status_code == 404
    remaining = (await client.get("/api/bookings", headers=ADMIN_HEADERS)).json()
    assert [b["event_id"] for b in remaining] == [other_id]

    assert (await client.delete(f"/api/events/{event_id}", headers=ADMIN_HEADERS)).status_code == 404


async def test_filter_wildcards_match_literally(client, make_event):
    await make_event(title="100% Jazz", location="Hall_A")
    await make_event(title="Rock Fest", location="HallBA")

    by_percent = (await client.get("/api/events", params={"q": "%"})).json()
    assert [e["title"] for e in by_percent] == ["100% Jazz"]

    by_underscore = (await client.get("/api/events", params={"location": "l_A"})).json()
    assert [e["location"] for e in by_underscore] == ["Hall_A"]
