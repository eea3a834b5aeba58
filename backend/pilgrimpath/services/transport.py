"""Shuttle and e-rickshaw routes, and booking seats on them."""

from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from pilgrimpath.models.booking import Booking
from pilgrimpath.models.user import User
from pilgrimpath.schemas.booking import BookingStatus, BookingType, PaymentStatus
from pilgrimpath.schemas.transport import TransportBookingCreate
from pilgrimpath.services.bookings import save_booking

TRANSPORT_ROUTES = [
    {
        "id": 1,
        "name": "Main Shuttle Route",
        "type": "shuttle",
        "from": {"name": "Station A", "coordinates": [77.2090, 28.6139]},
        "to": {"name": "Temple Complex", "coordinates": [77.2090, 28.6140]},
        "duration": 15,
        "price": 50,
        "capacity": 20,
        "frequency": "Every 10 minutes",
        "status": "active",
    },
    {
        "id": 2,
        "name": "E-Rickshaw Zone 1",
        "type": "e_rickshaw",
        "from": {"name": "Parking Lot 1", "coordinates": [77.2100, 28.6140]},
        "to": {"name": "Main Ghat", "coordinates": [77.2095, 28.6145]},
        "duration": 8,
        "price": 30,
        "capacity": 4,
        "frequency": "On demand",
        "status": "active",
    },
]


def list_routes(
    route_type: Optional[str] = None,
    origin: Optional[str] = None,
    destination: Optional[str] = None,
) -> List[dict]:
    routes = [route for route in TRANSPORT_ROUTES if route["status"] == "active"]
    if route_type:
        routes = [route for route in routes if route["type"] == route_type]
    if origin and destination:
        # Loose match on either end of the route
        routes = [
            route for route in routes
            if origin.lower() in route["from"]["name"].lower()
            or destination.lower() in route["to"]["name"].lower()
        ]
    return routes


def get_route(route_id: int) -> dict:
    for route in TRANSPORT_ROUTES:
        if route["id"] == route_id:
            return route
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Route not found")


async def book_transport(db: AsyncSession, data: TransportBookingCreate, user: User) -> Booking:
    route = get_route(data.route_id)
    if data.passengers > route["capacity"]:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Exceeds vehicle capacity",
        )

    booking = Booking(
        user_id=user.id,
        type=BookingType.transport.value,
        transport_details={
            "vehicle_type": route["type"],
            "route": {"from": route["from"], "to": route["to"]},
            "scheduled_time": data.scheduled_time.isoformat(),
            "estimated_duration": route["duration"],
            "capacity": route["capacity"],
            "passengers": data.passengers,
            "price": route["price"],
        },
        status=BookingStatus.pending.value,
        payment={
            "method": None,
            "amount": route["price"] * data.passengers,
            "status": PaymentStatus.pending.value,
            "transaction_id": None,
        },
        special_requests=data.special_requests,
        contact_info=data.contact_info.model_dump(mode="json"),
    )
    return await save_booking(db, booking)
