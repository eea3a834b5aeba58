from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from pilgrimpath.core.database import get_db
from pilgrimpath.models.user import User
from pilgrimpath.routers.auth import get_current_user
from pilgrimpath.schemas.booking import (
    BookingCreate,
    BookingPage,
    BookingResponse,
    BookingStatus,
    BookingStatusUpdate,
    BookingType,
)
from pilgrimpath.services import bookings as booking_service

router = APIRouter(prefix="/api/bookings", tags=["bookings"])

@router.get("", response_model=BookingPage)
async def get_my_bookings(
    type: Optional[BookingType] = None,
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    bookings, total, total_pages = await booking_service.list_user_bookings(
        db,
        current_user,
        booking_type=type.value if type else None,
        booking_status=status_filter.value if status_filter else None,
        page=page,
        limit=limit,
    )
    return {
        "bookings": bookings,
        "total_pages": total_pages,
        "current_page": page,
        "total": total,
    }

@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_in: BookingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await booking_service.create_booking(db, booking_in, current_user)

@router.put("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: int,
    update: BookingStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await booking_service.update_booking_status(db, booking_id, update.status, current_user)
