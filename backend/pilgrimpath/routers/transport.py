from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from pilgrimpath.core.database import get_db
from pilgrimpath.models.user import User
from pilgrimpath.routers.auth import get_current_user
from pilgrimpath.schemas.booking import BookingResponse, VehicleType
from pilgrimpath.schemas.transport import TransportBookingCreate, TransportRouteInfo
from pilgrimpath.services import transport as transport_service

router = APIRouter(prefix="/api/transport", tags=["transport"])

@router.get("/routes", response_model=List[TransportRouteInfo], response_model_by_alias=True)
async def get_routes(
    type: Optional[VehicleType] = None,
    from_: Optional[str] = Query(None, alias="from"),
    to: Optional[str] = None,
):
    """Public catalog of active routes."""
    return transport_service.list_routes(type.value if type else None, from_, to)

@router.post("/book", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def book_transport(
    booking_in: TransportBookingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await transport_service.book_transport(db, booking_in, current_user)
