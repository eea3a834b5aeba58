import logging
from math import ceil
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy import String, cast, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from pilgrimpath.models.room import Room, RoomReview
from pilgrimpath.models.user import User
from pilgrimpath.schemas.room import ReviewCreate, RoomCreate, VerificationStatus
from pilgrimpath.services.geo import box_conditions, haversine_m

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_RADIUS_M = 5000


async def get_room(db: AsyncSession, room_id: int) -> Room:
    result = await db.execute(
        select(Room).where(Room.id == room_id).execution_options(populate_existing=True)
    )
    room = result.scalar_one_or_none()
    if room is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    return room


async def list_public_rooms(
    db: AsyncSession,
    sector: Optional[str] = None,
    room_type: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    amenities: Optional[List[str]] = None,
    near: Optional[Tuple[float, float]] = None,
    radius_m: float = DEFAULT_SEARCH_RADIUS_M,
    page: int = 1,
    limit: int = 10,
) -> Tuple[List[Room], int, int]:
    """
    Verified, active rooms only, paged in SQL. A point search narrows the
    query to the surrounding lat/lng box and then keeps rooms whose exact
    great-circle distance is within ``radius_m``.
    """
    conditions = [Room.is_active.is_(True), Room.verification_status == VerificationStatus.verified.value]
    if sector:
        conditions.append(Room.sector == sector)
    if room_type:
        conditions.append(Room.type == room_type)
    if min_price is not None:
        conditions.append(Room.price_per_night >= min_price)
    if max_price is not None:
        conditions.append(Room.price_per_night <= max_price)
    if amenities:
        # Stored as a JSON list of amenity identifiers
        stored = cast(Room.amenities, String)
        conditions.append(
            or_(*[stored.contains(f'"{amenity}"', autoescape=True) for amenity in set(amenities)])
        )

    query = (
        select(Room)
        .where(*conditions)
        .order_by(Room.rating_average.desc(), Room.created_at.desc(), Room.id.desc())
    )
    start = (page - 1) * limit

    if near is not None:
        lng, lat = near
        query = query.where(*box_conditions(Room.longitude, Room.latitude, lng, lat, radius_m))
        rooms = [
            room for room in (await db.execute(query)).scalars().all()
            if haversine_m(lng, lat, room.longitude, room.latitude) <= radius_m
        ]
        total = len(rooms)
        return rooms[start:start + limit], total, ceil(total / limit)

    total = (await db.execute(select(func.count(Room.id)).where(*conditions))).scalar_one()
    result = await db.execute(query.offset(start).limit(limit))
    return list(result.scalars().all()), total, ceil(total / limit)


async def create_room(db: AsyncSession, data: RoomCreate, owner: User) -> Room:
    lng, lat = data.location.coordinates
    room = Room(
        title=data.title,
        description=data.description,
        owner_id=owner.id,
        longitude=lng,
        latitude=lat,
        address=data.location.address.model_dump(mode="json") if data.location.address else None,
        sector=data.location.sector,
        type=data.type.value,
        capacity_adults=data.capacity.adults,
        capacity_children=data.capacity.children,
        price_per_night=data.price.per_night,
        currency=data.price.currency,
        amenities=list(dict.fromkeys(a.value for a in data.amenities)),
        images=[image.model_dump(mode="json") for image in data.images],
        availability=data.availability.model_dump(mode="json") if data.availability else None,
        rules=data.rules,
        contact_info=data.contact_info.model_dump(mode="json") if data.contact_info else None,
        verification_status=VerificationStatus.pending.value,
    )
    db.add(room)
    await db.commit()
    logger.info("Room %s listed by user %s", room.id, owner.id)
    return await get_room(db, room.id)


async def add_review(db: AsyncSession, room_id: int, data: ReviewCreate, user: User) -> Room:
    # Row lock serializes reviewers of the same room
    locked = await db.execute(select(Room.id).where(Room.id == room_id).with_for_update())
    if locked.scalar_one_or_none() is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")

    db.add(RoomReview(room_id=room_id, user_id=user.id, rating=data.rating, comment=data.comment))
    await db.flush()

    # Rating is always the plain mean over every stored review
    of_room = RoomReview.room_id == room_id
    await db.execute(
        update(Room)
        .where(Room.id == room_id)
        .values(
            rating_average=select(func.avg(RoomReview.rating)).where(of_room).scalar_subquery(),
            rating_count=select(func.count(RoomReview.id)).where(of_room).scalar_subquery(),
        )
        .execution_options(synchronize_session=False)
    )
    await db.commit()

    logger.info("Room %s reviewed by user %s (%s)", room_id, user.id, data.rating)
    return await get_room(db, room_id)


async def set_verification(db: AsyncSession, room_id: int, verification: VerificationStatus) -> Room:
    room = await get_room(db, room_id)
    room.verification_status = VerificationStatus(verification).value
    await db.commit()
    logger.info("Room %s verification set to %s", room_id, room.verification_status)
    return await get_room(db, room_id)
