from typing import List, Optional
from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from pilgrimpath.core.database import get_db
from pilgrimpath.core.events import EventBus, get_event_bus
from pilgrimpath.models.user import User
from pilgrimpath.routers.auth import get_current_user, require_moderator
from pilgrimpath.schemas.incident import (
    IncidentCategory,
    IncidentCreate,
    IncidentPage,
    IncidentPriority,
    IncidentResponse,
    IncidentSortField,
    IncidentStats,
    IncidentStatus,
    IncidentStatusUpdate,
    NearbyIncident,
    NoteCreate,
    SortOrder,
)
from pilgrimpath.services import analytics, incidents as incident_service

router = APIRouter(
    prefix="/api/incidents",
    tags=["incidents"],
    responses={404: {"description": "Not found"}},
)

@router.get("", response_model=IncidentPage)
async def get_incidents(
    status_filter: Optional[IncidentStatus] = Query(None, alias="status"),
    priority: Optional[IncidentPriority] = None,
    category: Optional[IncidentCategory] = None,
    sector: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: IncidentSortField = IncidentSortField.created_at,
    sort_order: SortOrder = SortOrder.desc,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    incidents, total, total_pages = await incident_service.list_incidents(
        db,
        status_filter=status_filter.value if status_filter else None,
        priority=priority.value if priority else None,
        category=category.value if category else None,
        sector=sector,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return {
        "incidents": incidents,
        "total_pages": total_pages,
        "current_page": page,
        "total": total,
    }

@router.get("/stats/overview", response_model=IncidentStats)
async def get_incident_stats(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await analytics.incident_stats(db)

@router.get("/nearby/{lng}/{lat}", response_model=List[NearbyIncident])
async def get_nearby_incidents(
    lng: float = Path(..., ge=-180, le=180, allow_inf_nan=False),
    lat: float = Path(..., ge=-90, le=90, allow_inf_nan=False),
    radius: float = Query(incident_service.DEFAULT_NEARBY_RADIUS_M, ge=0, allow_inf_nan=False),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Incidents within ``radius`` meters of the point, nearest first."""
    matches = await incident_service.find_nearby(db, lng, lat, radius)
    return [
        NearbyIncident(**incident_service.incident_payload(incident), distance=distance)
        for incident, distance in matches
    ]

@router.get("/{incident_id}", response_model=IncidentResponse)
async def get_incident(
    incident_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await incident_service.get_incident(db, incident_id)

@router.post("", response_model=IncidentResponse, status_code=status.HTTP_201_CREATED)
async def create_incident(
    incident_in: IncidentCreate,
    db: AsyncSession = Depends(get_db),
    bus: EventBus = Depends(get_event_bus),
    current_user: User = Depends(get_current_user),
):
    return await incident_service.create_incident(db, bus, incident_in, current_user)

@router.put("/{incident_id}/status", response_model=IncidentResponse)
async def update_incident_status(
    incident_id: int,
    update: IncidentStatusUpdate,
    db: AsyncSession = Depends(get_db),
    bus: EventBus = Depends(get_event_bus),
    current_user: User = Depends(require_moderator),
):
    return await incident_service.update_status(
        db, bus, incident_id, update.status, assigned_to=update.assigned_to
    )

@router.post("/{incident_id}/notes", response_model=IncidentResponse)
async def add_incident_note(
    incident_id: int,
    note_in: NoteCreate,
    db: AsyncSession = Depends(get_db),
    bus: EventBus = Depends(get_event_bus),
    current_user: User = Depends(get_current_user),
):
    return await incident_service.add_note(db, bus, incident_id, note_in.text, current_user)
