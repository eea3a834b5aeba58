from conftest import auth_headers

CONTACT = {"name": "John Doe", "phone": "+91 9876543211", "email": "john@example.com"}

ACCOMMODATION = {
    "type": "accommodation",
    "accommodation_details": {
        "room_id": 1,
        "check_in": "2026-03-10T12:00:00",
        "check_out": "2026-03-12T10:00:00",
        "guests": 2,
        "price": 2400,
    },
    "transport_details": {"vehicle_type": "shuttle", "passengers": 2},
    "contact_info": CONTACT,
}


async def test_create_keeps_matching_details_only(client, pilgrim, pilgrim_headers):
    response = await client.post("/api/bookings", json=ACCOMMODATION, headers=pilgrim_headers)

    assert response.status_code == 201
    booking = response.json()
    assert booking["status"] == "pending"
    assert booking["user_id"] == pilgrim.id
    assert booking["accommodation_details"]["guests"] == 2
    assert booking["transport_details"] is None


async def test_create_validates_contact(client, pilgrim_headers):
    body = {**ACCOMMODATION, "contact_info": {"name": "J", "phone": "call me"}}

    response = await client.post("/api/bookings", json=body, headers=pilgrim_headers)

    assert response.status_code == 400
    fields = {error["field"] for error in response.json()["errors"]}
    assert fields == {"contact_info.name", "contact_info.phone"}


async def test_list_only_own_bookings(client, make_user, pilgrim_headers):
    other = await make_user("ram@example.com")
    await client.post("/api/bookings", json=ACCOMMODATION, headers=pilgrim_headers)
    await client.post("/api/bookings", json=ACCOMMODATION, headers=auth_headers(other))

    response = await client.get("/api/bookings", headers=pilgrim_headers)

    body = response.json()
    assert body["total"] == 1
    assert body["current_page"] == 1
    assert body["total_pages"] == 1


async def test_status_update_by_owner(client, pilgrim_headers):
    booking = (await client.post("/api/bookings", json=ACCOMMODATION, headers=pilgrim_headers)).json()

    response = await client.put(
        f"/api/bookings/{booking['id']}/status", json={"status": "cancelled"}, headers=pilgrim_headers
    )

    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"

    cancelled = await client.get("/api/bookings", params={"status": "cancelled"}, headers=pilgrim_headers)
    assert cancelled.json()["total"] == 1


async def test_status_update_by_stranger_is_not_found(client, make_user, pilgrim_headers, admin_headers):
    booking = (await client.post("/api/bookings", json=ACCOMMODATION, headers=pilgrim_headers)).json()
    stranger = await make_user("raj@example.com")
    url = f"/api/bookings/{booking['id']}/status"

    response = await client.put(url, json={"status": "confirmed"}, headers=auth_headers(stranger))
    assert response.status_code == 404

    response = await client.put(url, json={"status": "confirmed"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "confirmed"


async def test_transport_routes(client, pilgrim_headers):
    response = await client.get("/api/transport/routes", headers=pilgrim_headers)
    routes = response.json()
    assert [r["type"] for r in routes] == ["shuttle", "e_rickshaw"]
    assert routes[0]["from"]["name"] == "Station A"

    response = await client.get(
        "/api/transport/routes", params={"type": "e_rickshaw"}, headers=pilgrim_headers
    )
    assert [r["id"] for r in response.json()] == [2]


async def test_transport_routes_are_public(client):
    response = await client.get("/api/transport/routes", params={"from": "station", "to": "ghat"})

    assert response.status_code == 200
    assert [r["id"] for r in response.json()] == [1, 2]

    response = await client.get("/api/transport/routes", params={"from": "parking", "to": "nowhere"})
    assert [r["id"] for r in response.json()] == [2]


async def test_book_transport(client, pilgrim_headers):
    body = {
        "route_id": 1,
        "scheduled_time": "2026-03-10T06:30:00",
        "passengers": 3,
        "contact_info": CONTACT,
    }

    response = await client.post("/api/transport/book", json=body, headers=pilgrim_headers)

    assert response.status_code == 201
    booking = response.json()
    assert booking["type"] == "transport"
    assert booking["payment"]["amount"] == 150
    assert booking["transport_details"]["route"]["from"]["name"] == "Station A"
    assert booking["accommodation_details"] is None


async def test_book_transport_over_capacity(client, pilgrim_headers):
    body = {
        "route_id": 2,
        "scheduled_time": "2026-03-10T06:30:00",
        "passengers": 5,
        "contact_info": CONTACT,
    }

    response = await client.post("/api/transport/book", json=body, headers=pilgrim_headers)

    assert response.status_code == 400
    assert response.json() == {"detail": "Exceeds vehicle capacity"}


async def test_book_unknown_route(client, pilgrim_headers):
    body = {
        "route_id": 42,
        "scheduled_time": "2026-03-10T06:30:00",
        "passengers": 1,
        "contact_info": CONTACT,
    }

    response = await client.post("/api/transport/book", json=body, headers=pilgrim_headers)

    assert response.status_code == 404
