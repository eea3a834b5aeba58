from datetime import datetime, timedelta

import pytest

from conftest import auth_headers
from pilgrimpath.schemas.incident import IncidentCreate
from pilgrimpath.services import incidents as incident_service
from pilgrimpath.services.geo import haversine_m

INCIDENT = {
    "title": "Heat stroke near gate",
    "description": "Elderly pilgrim collapsed in the queue near gate 3.",
    "category": "health",
    "location": {"type": "Point", "coordinates": [77.2090, 28.6139], "sector": "A"},
}


async def report(client, headers, **overrides):
    body = {**INCIDENT, **overrides}
    response = await client.post("/api/incidents", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class Clock:
    def __init__(self, start):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock(monkeypatch):
    clock = Clock(datetime(2026, 3, 1, 8, 0, 0))
    monkeypatch.setattr(incident_service, "utcnow", clock)
    return clock


async def test_create_defaults_and_event(client, bus, pilgrim, pilgrim_headers):
    incident = await report(client, pilgrim_headers, tags=["heat", "heat", "elderly"])

    assert incident["priority"] == "medium"
    assert incident["status"] == "open"
    assert incident["reporter"]["id"] == pilgrim.id
    assert incident["location"] == {
        "type": "Point",
        "coordinates": [77.2090, 28.6139],
        "address": None,
        "sector": "A",
    }
    assert incident["tags"] == ["heat", "elderly"]
    assert incident["response_time"]["reported"] is not None
    assert incident["response_time"]["first_response"] is None
    assert bus.names == ["new-incident"]
    assert bus.events[0][1]["id"] == incident["id"]


async def test_open_straight_to_resolved_leaves_first_response_unset(
    client, bus, pilgrim_headers, moderator_headers
):
    incident = await report(client, pilgrim_headers)

    response = await client.put(
        f"/api/incidents/{incident['id']}/status",
        json={"status": "resolved"},
        headers=moderator_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "resolved"
    assert body["response_time"]["first_response"] is None
    assert body["response_time"]["resolved"] is not None
    assert bus.names == ["new-incident", "incident-updated"]


async def test_first_response_set_once(client, clock, pilgrim_headers, moderator_headers):
    incident = await report(client, pilgrim_headers)
    url = f"/api/incidents/{incident['id']}/status"

    clock.advance(minutes=5)
    first = await client.put(url, json={"status": "in_progress"}, headers=moderator_headers)
    clock.advance(minutes=10)
    second = await client.put(url, json={"status": "in_progress"}, headers=moderator_headers)

    assert first.json()["response_time"]["first_response"] == "2026-03-01T08:05:00"
    assert second.json()["response_time"]["first_response"] == "2026-03-01T08:05:00"


async def test_resolved_is_overwritten_every_time(client, clock, pilgrim_headers, moderator_headers):
    incident = await report(client, pilgrim_headers)
    url = f"/api/incidents/{incident['id']}/status"

    clock.advance(minutes=30)
    first = await client.put(url, json={"status": "resolved"}, headers=moderator_headers)
    clock.advance(minutes=15)
    second = await client.put(url, json={"status": "resolved"}, headers=moderator_headers)

    assert first.json()["response_time"]["resolved"] == "2026-03-01T08:30:00"
    assert second.json()["response_time"]["resolved"] == "2026-03-01T08:45:00"


async def test_open_to_closed_is_allowed(client, pilgrim_headers, moderator_headers):
    incident = await report(client, pilgrim_headers)

    response = await client.put(
        f"/api/incidents/{incident['id']}/status",
        json={"status": "closed"},
        headers=moderator_headers,
    )

    assert response.status_code == 200
    assert response.json()["status"] == "closed"
    assert response.json()["response_time"]["resolved"] is None


async def test_status_update_assigns_user(client, moderator, pilgrim_headers, moderator_headers):
    incident = await report(client, pilgrim_headers)

    response = await client.put(
        f"/api/incidents/{incident['id']}/status",
        json={"status": "in_progress", "assigned_to": moderator.id},
        headers=moderator_headers,
    )

    assert response.json()["assigned_to"]["id"] == moderator.id


async def test_status_update_unknown_assignee(client, bus, pilgrim_headers, moderator_headers):
    incident = await report(client, pilgrim_headers)

    response = await client.put(
        f"/api/incidents/{incident['id']}/status",
        json={"status": "in_progress", "assigned_to": 9999},
        headers=moderator_headers,
    )

    assert response.status_code == 400
    assert response.json() == {
        "message": "Validation failed",
        "errors": [{"field": "assigned_to", "message": "User not found"}],
    }
    assert bus.names == ["new-incident"]

    stored = await client.get(f"/api/incidents/{incident['id']}", headers=pilgrim_headers)
    assert stored.json()["status"] == "open"


async def test_status_update_requires_moderator(client, pilgrim_headers):
    incident = await report(client, pilgrim_headers)

    response = await client.put(
        f"/api/incidents/{incident['id']}/status",
        json={"status": "resolved"},
        headers=pilgrim_headers,
    )

    assert response.status_code == 403


async def test_status_update_missing_incident(client, moderator_headers):
    response = await client.put(
        "/api/incidents/404/status", json={"status": "resolved"}, headers=moderator_headers
    )
    assert response.status_code == 404
    assert response.json() == {"detail": "Incident not found"}


async def test_add_note(client, bus, pilgrim, pilgrim_headers):
    incident = await report(client, pilgrim_headers)

    response = await client.post(
        f"/api/incidents/{incident['id']}/notes",
        json={"text": "Medical team on the way"},
        headers=pilgrim_headers,
    )

    assert response.status_code == 200
    notes = response.json()["notes"]
    assert len(notes) == 1
    assert notes[0]["text"] == "Medical team on the way"
    assert notes[0]["author"] == {"id": pilgrim.id, "name": "John Doe"}

    event, payload = bus.events[-1]
    assert event == "incident-note-added"
    assert payload["incident_id"] == incident["id"]
    assert payload["note"]["text"] == "Medical team on the way"


async def test_notes_accumulate(client, pilgrim_headers, moderator_headers):
    incident = await report(client, pilgrim_headers)
    url = f"/api/incidents/{incident['id']}/notes"

    await client.post(url, json={"text": "first"}, headers=pilgrim_headers)
    response = await client.post(url, json={"text": "second"}, headers=moderator_headers)

    assert [n["text"] for n in response.json()["notes"]] == ["first", "second"]


async def test_create_validation_errors(client, bus, pilgrim_headers):
    body = {
        **INCIDENT,
        "title": "Bad",
        "location": {"coordinates": [77.2]},
    }

    response = await client.post("/api/incidents", json=body, headers=pilgrim_headers)

    assert response.status_code == 400
    payload = response.json()
    assert payload["message"] == "Validation failed"
    fields = {error["field"] for error in payload["errors"]}
    assert "title" in fields
    assert "location.coordinates" in fields
    assert bus.events == []


async def test_create_rejects_unknown_category(client, pilgrim_headers):
    response = await client.post(
        "/api/incidents", json={**INCIDENT, "category": "weather"}, headers=pilgrim_headers
    )
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "category"


async def test_create_requires_auth(client):
    response = await client.post("/api/incidents", json=INCIDENT)
    assert response.status_code == 401


async def test_list_filters_and_pagination(client, pilgrim_headers):
    await report(client, pilgrim_headers, priority="critical")
    await report(client, pilgrim_headers, category="crowding")
    await report(client, pilgrim_headers, category="crowding", priority="low")

    response = await client.get(
        "/api/incidents", params={"category": "crowding", "limit": 1}, headers=pilgrim_headers
    )

    body = response.json()
    assert body["total"] == 2
    assert body["total_pages"] == 2
    assert body["current_page"] == 1
    assert len(body["incidents"]) == 1

    critical = await client.get(
        "/api/incidents", params={"priority": "critical"}, headers=pilgrim_headers
    )
    assert critical.json()["total"] == 1


async def test_list_sorting(client, pilgrim_headers):
    await report(client, pilgrim_headers, title="Bravo incident")
    await report(client, pilgrim_headers, title="Alpha incident")

    response = await client.get(
        "/api/incidents",
        params={"sort_by": "title", "sort_order": "asc"},
        headers=pilgrim_headers,
    )

    assert [i["title"] for i in response.json()["incidents"]] == ["Alpha incident", "Bravo incident"]


async def test_get_missing_incident(client, pilgrim_headers):
    response = await client.get("/api/incidents/12345", headers=pilgrim_headers)
    assert response.status_code == 404


async def test_stats_overview(client, pilgrim_headers, moderator_headers):
    first = await report(client, pilgrim_headers, priority="critical", is_emergency=True)
    await report(client, pilgrim_headers)
    await client.put(
        f"/api/incidents/{first['id']}/status", json={"status": "resolved"}, headers=moderator_headers
    )

    response = await client.get("/api/incidents/stats/overview", headers=pilgrim_headers)

    stats = response.json()
    assert stats["total"] == 2
    assert stats["open"] == 1
    assert stats["resolved"] == 1
    assert stats["critical"] == 1
    assert stats["emergency"] == 1
    assert stats["avg_resolution_time"] is not None


async def test_nearby_sorted_with_distance(client, pilgrim_headers):
    far = await report(
        client, pilgrim_headers, location={"coordinates": [77.2150, 28.6139]}
    )
    near = await report(
        client, pilgrim_headers, location={"coordinates": [77.2095, 28.6139]}
    )
    await report(client, pilgrim_headers, location={"coordinates": [78.0, 29.0]})

    response = await client.get(
        "/api/incidents/nearby/77.2090/28.6139", params={"radius": 1000}, headers=pilgrim_headers
    )

    results = response.json()
    assert [r["id"] for r in results] == [near["id"], far["id"]]
    assert results[0]["distance"] < results[1]["distance"] <= 1000


@pytest.mark.parametrize(
    "point",
    [(77.2090, 28.6139), (-0.1276, 51.5072), (179.9, -45.0), (0.0, 89.9)],
)
async def test_nearby_finds_incident_at_its_own_distance(db, pilgrim, bus, point):
    data = IncidentCreate(**{**INCIDENT, "location": {"coordinates": list(point)}})
    incident = await incident_service.create_incident(db, bus, data, pilgrim)

    query = (point[0] + 0.01, point[1] - 0.005)
    distance = haversine_m(query[0], query[1], point[0], point[1])

    matches = await incident_service.find_nearby(db, query[0], query[1], distance + 1)
    assert incident.id in [match.id for match, _ in matches]

    too_close = await incident_service.find_nearby(db, query[0], query[1], distance - 1)
    assert incident.id not in [match.id for match, _ in too_close]


async def test_nearby_rejects_negative_radius(client, pilgrim_headers):
    response = await client.get(
        "/api/incidents/nearby/77.2/28.6", params={"radius": -5}, headers=pilgrim_headers
    )
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "radius"


async def test_inactive_user_token_rejected(client, make_user):
    inactive = await make_user("gone@example.com", role="moderator", is_active=False)
    response = await client.get("/api/incidents", headers=auth_headers(inactive))
    assert response.status_code == 401


@pytest.mark.parametrize(
    "coordinates",
    ['[NaN, 28.6]', '[77.2, Infinity]', '[500, 28.6]', '[77.2, 95]'],
)
async def test_create_rejects_bad_coordinates(client, bus, pilgrim_headers, coordinates):
    body = (
        '{"title": "Heat stroke near gate", '
        '"description": "Elderly pilgrim collapsed in the queue near gate 3.", '
        '"category": "health", '
        f'"location": {{"coordinates": {coordinates}}}}}'
    )

    response = await client.post(
        "/api/incidents",
        content=body,
        headers={**pilgrim_headers, "Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert [e["field"] for e in response.json()["errors"]] == ["location.coordinates"]
    assert bus.events == []


@pytest.mark.parametrize(
    "path",
    ["/api/incidents/nearby/nan/28.6", "/api/incidents/nearby/77.2/inf", "/api/incidents/nearby/200/28.6"],
)
async def test_nearby_rejects_bad_point(client, pilgrim_headers, path):
    response = await client.get(path, headers=pilgrim_headers)
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] in {"lng", "lat"}
