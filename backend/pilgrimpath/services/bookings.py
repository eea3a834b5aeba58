import logging
from math import ceil
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pilgrimpath.models.booking import Booking
from pilgrimpath.models.user import User
from pilgrimpath.schemas.booking import BookingCreate, BookingStatus, BookingType

logger = logging.getLogger(__name__)


def _dump(model):
    return model.model_dump(mode="json", by_alias=True) if model is not None else None


async def list_user_bookings(
    db: AsyncSession,
    user: User,
    booking_type: Optional[str] = None,
    booking_status: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
) -> Tuple[List[Booking], int, int]:
    conditions = [Booking.user_id == user.id]
    if booking_type:
        conditions.append(Booking.type == booking_type)
    if booking_status:
        conditions.append(Booking.status == booking_status)

    total = (await db.execute(select(func.count(Booking.id)).where(*conditions))).scalar_one()
    result = await db.execute(
        select(Booking)
        .where(*conditions)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(result.scalars().all()), total, ceil(total / limit)


async def save_booking(db: AsyncSession, booking: Booking) -> Booking:
    db.add(booking)
    await db.commit()
    logger.info("Booking %s (%s) created for user %s", booking.id, booking.type, booking.user_id)
    return booking


async def create_booking(db: AsyncSession, data: BookingCreate, user: User) -> Booking:
    # Only the details object that matches the booking type is kept
    is_transport = data.type == BookingType.transport
    booking = Booking(
        user_id=user.id,
        type=data.type.value,
        transport_details=_dump(data.transport_details) if is_transport else None,
        accommodation_details=None if is_transport else _dump(data.accommodation_details),
        status=BookingStatus.pending.value,
        payment=_dump(data.payment),
        special_requests=data.special_requests,
        contact_info=_dump(data.contact_info),
    )
    return await save_booking(db, booking)


async def update_booking_status(
    db: AsyncSession, booking_id: int, new_status: BookingStatus, user: User
) -> Booking:
    booking = await db.get(Booking, booking_id)
    # Someone else's booking looks the same as a missing one
    if booking is None or (booking.user_id != user.id and user.role != "admin"):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")

    previous = booking.status
    booking.status = BookingStatus(new_status).value
    await db.commit()
    await db.refresh(booking)
    logger.info("Booking %s status %s -> %s by user %s", booking_id, previous, booking.status, user.id)
    return booking
