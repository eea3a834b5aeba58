from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from pilgrimpath.core.database import get_db
from pilgrimpath.core.exceptions import FieldValidationError
from pilgrimpath.models.user import User
from pilgrimpath.schemas.common import check_point
from pilgrimpath.routers.auth import get_current_user, require_admin
from pilgrimpath.schemas.room import (
    ReviewCreate,
    RoomCreate,
    RoomPage,
    RoomResponse,
    RoomType,
    VerificationUpdate,
)
from pilgrimpath.services import rooms as room_service

router = APIRouter(
    prefix="/api/rooms",
    tags=["rooms"],
    responses={404: {"description": "Not found"}},
)

def parse_point(value: str):
    """Parse ``"lng,lat"`` into a pair of floats."""
    try:
        lng, lat = (float(part) for part in value.split(","))
    except ValueError:
        raise FieldValidationError("coordinates", "Expected 'lng,lat'")
    try:
        check_point([lng, lat])
    except ValueError as exc:
        raise FieldValidationError("coordinates", str(exc))
    return lng, lat

@router.get("", response_model=RoomPage)
async def get_rooms(
    sector: Optional[str] = None,
    type: Optional[RoomType] = None,
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    amenities: Optional[str] = None,
    coordinates: Optional[str] = None,
    radius: float = Query(room_service.DEFAULT_SEARCH_RADIUS_M, ge=0, allow_inf_nan=False),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    rooms, total, total_pages = await room_service.list_public_rooms(
        db,
        sector=sector,
        room_type=type.value if type else None,
        min_price=min_price,
        max_price=max_price,
        amenities=[a.strip() for a in amenities.split(",") if a.strip()] if amenities else None,
        near=parse_point(coordinates) if coordinates else None,
        radius_m=radius,
        page=page,
        limit=limit,
    )
    return {
        "rooms": rooms,
        "total_pages": total_pages,
        "current_page": page,
        "total": total,
    }

@router.get("/{room_id}", response_model=RoomResponse)
async def get_room(room_id: int, db: AsyncSession = Depends(get_db)):
    return await room_service.get_room(db, room_id)

@router.post("", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
async def create_room(
    room_in: RoomCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await room_service.create_room(db, room_in, current_user)

@router.post("/{room_id}/reviews", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
async def add_review(
    room_id: int,
    review_in: ReviewCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await room_service.add_review(db, room_id, review_in, current_user)

@router.put("/{room_id}/verification", response_model=RoomResponse)
async def update_verification(
    room_id: int,
    update: VerificationUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return await room_service.set_verification(db, room_id, update.verification_status)
