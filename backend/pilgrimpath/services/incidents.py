"""
Incident lifecycle: reporting, status changes, notes and proximity search.

Every write commits first and then publishes to the event bus. The publish is
not retried and a failed publish does not undo the write.
"""

import logging
from math import ceil
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pilgrimpath.core.events import (
    EventBus,
    INCIDENT_NOTE_ADDED,
    INCIDENT_UPDATED,
    NEW_INCIDENT,
)
from pilgrimpath.core.exceptions import FieldValidationError
from pilgrimpath.models.common import utcnow
from pilgrimpath.models.incident import Incident, IncidentNote
from pilgrimpath.models.user import User
from pilgrimpath.schemas.incident import (
    IncidentCreate,
    IncidentResponse,
    IncidentSortField,
    IncidentStatus,
    NoteResponse,
    SortOrder,
)
from pilgrimpath.services.geo import box_conditions, haversine_m

logger = logging.getLogger(__name__)

DEFAULT_NEARBY_RADIUS_M = 1000


def incident_payload(incident: Incident) -> dict:
    return IncidentResponse.model_validate(incident).model_dump(mode="json")


async def get_incident(db: AsyncSession, incident_id: int) -> Incident:
    result = await db.execute(
        select(Incident)
        .where(Incident.id == incident_id)
        .execution_options(populate_existing=True)
    )
    incident = result.scalar_one_or_none()
    if incident is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Incident not found",
        )
    return incident


async def list_incidents(
    db: AsyncSession,
    status_filter: Optional[str] = None,
    priority: Optional[str] = None,
    category: Optional[str] = None,
    sector: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    sort_by: IncidentSortField = IncidentSortField.created_at,
    sort_order: SortOrder = SortOrder.desc,
) -> Tuple[List[Incident], int, int]:
    conditions = []
    if status_filter:
        conditions.append(Incident.status == status_filter)
    if priority:
        conditions.append(Incident.priority == priority)
    if category:
        conditions.append(Incident.category == category)
    if sector:
        conditions.append(Incident.sector == sector)

    total = (
        await db.execute(select(func.count(Incident.id)).where(*conditions))
    ).scalar_one()

    column = getattr(Incident, IncidentSortField(sort_by).value)
    ordering = column.desc() if sort_order == SortOrder.desc else column.asc()
    result = await db.execute(
        select(Incident)
        .where(*conditions)
        .order_by(ordering, Incident.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    incidents = list(result.scalars().all())
    return incidents, total, ceil(total / limit)


async def create_incident(
    db: AsyncSession, bus: EventBus, data: IncidentCreate, reporter: User
) -> Incident:
    lng, lat = data.location.coordinates
    incident = Incident(
        title=data.title,
        description=data.description,
        category=data.category.value,
        priority=data.priority.value,
        status=IncidentStatus.open.value,
        reporter_id=reporter.id,
        longitude=lng,
        latitude=lat,
        address=data.location.address,
        sector=data.location.sector,
        media=[item.model_dump(mode="json") for item in data.media],
        # Tags behave as a set; keep first-seen order
        tags=list(dict.fromkeys(data.tags)),
        estimated_crowd_size=data.estimated_crowd_size,
        reported_at=utcnow(),
        is_emergency=data.is_emergency,
        ai_detected=data.ai_detected,
    )
    db.add(incident)
    await db.commit()

    incident = await get_incident(db, incident.id)
    logger.info(
        "Incident %s reported by user %s (%s, %s)",
        incident.id, reporter.id, incident.category, incident.priority,
    )
    await bus.publish(NEW_INCIDENT, incident_payload(incident))
    return incident


async def update_status(
    db: AsyncSession,
    bus: EventBus,
    incident_id: int,
    new_status: IncidentStatus,
    assigned_to: Optional[int] = None,
) -> Incident:
    """
    Move an incident to any status. There is no transition table: open can go
    straight to closed or resolved, in which case first_response stays unset.
    """
    incident = await get_incident(db, incident_id)
    new_status = IncidentStatus(new_status)

    if assigned_to is not None:
        assignee = await db.get(User, assigned_to)
        if assignee is None:
            raise FieldValidationError("assigned_to", "User not found")
        incident.assigned_to_id = assignee.id

    now = utcnow()
    previous = incident.status
    incident.status = new_status.value
    if new_status == IncidentStatus.in_progress and incident.first_response_at is None:
        incident.first_response_at = now
    if new_status == IncidentStatus.resolved:
        # Overwritten on every transition to resolved
        incident.resolved_at = now
    await db.commit()

    incident = await get_incident(db, incident_id)
    logger.info("Incident %s status %s -> %s", incident_id, previous, incident.status)
    await bus.publish(INCIDENT_UPDATED, incident_payload(incident))
    return incident


async def add_note(
    db: AsyncSession, bus: EventBus, incident_id: int, text: str, author: User
) -> Incident:
    await get_incident(db, incident_id)

    # Appending is a plain INSERT so concurrent notes never overwrite each other
    note = IncidentNote(
        incident_id=incident_id,
        text=text,
        author_id=author.id,
        timestamp=utcnow(),
    )
    db.add(note)
    await db.commit()
    note_id = note.id

    incident = await get_incident(db, incident_id)
    saved = next(n for n in incident.notes if n.id == note_id)
    logger.info("Note %s added to incident %s by user %s", note_id, incident_id, author.id)
    await bus.publish(
        INCIDENT_NOTE_ADDED,
        {
            "incident_id": incident_id,
            "note": NoteResponse.model_validate(saved).model_dump(mode="json"),
        },
    )
    return incident


async def find_nearby(
    db: AsyncSession, lng: float, lat: float, radius_m: float = DEFAULT_NEARBY_RADIUS_M
) -> List[Tuple[Incident, float]]:
    """Incidents of any status within ``radius_m`` meters, nearest first."""
    conditions = box_conditions(Incident.longitude, Incident.latitude, lng, lat, radius_m)
    result = await db.execute(select(Incident).where(*conditions))
    matches = []
    for incident in result.scalars().all():
        distance = haversine_m(lng, lat, incident.longitude, incident.latitude)
        if distance <= radius_m:
            matches.append((incident, distance))
    matches.sort(key=lambda match: match[1])
    return matches
