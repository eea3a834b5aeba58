import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from pilgrimpath.models.user import User
from pilgrimpath.routers.auth import get_current_user, require_admin
from pilgrimpath.schemas.notification import (
    NotificationCreate,
    NotificationPage,
    NotificationPriority,
    NotificationResponse,
    NotificationStats,
    NotificationType,
)
from pilgrimpath.services.notifications import NotificationStore, get_notification_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notifications", tags=["notifications"])

@router.get("", response_model=NotificationPage)
async def get_notifications(
    type: Optional[NotificationType] = None,
    priority: Optional[NotificationPriority] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    store: NotificationStore = Depends(get_notification_store),
    current_user: User = Depends(get_current_user),
):
    return await store.list(
        type=type.value if type else None,
        priority=priority.value if priority else None,
        page=page,
        limit=limit,
    )

# Declared before /{notification_id}/read so "read-all" is not taken as an id
@router.put("/read-all")
async def mark_all_notifications_read(
    store: NotificationStore = Depends(get_notification_store),
    current_user: User = Depends(get_current_user),
):
    updated = await store.mark_all_read()
    logger.info("Marked %s notifications read", updated)
    return await store.read_state()

@router.put("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: int,
    store: NotificationStore = Depends(get_notification_store),
    current_user: User = Depends(get_current_user),
):
    return await store.mark_read(notification_id)

@router.post("", response_model=NotificationResponse, status_code=status.HTTP_201_CREATED)
async def create_notification(
    notification_in: NotificationCreate,
    store: NotificationStore = Depends(get_notification_store),
    current_user: User = Depends(require_admin),
):
    return await store.create(notification_in)

@router.get("/stats", response_model=NotificationStats)
async def get_notification_stats(
    store: NotificationStore = Depends(get_notification_store),
    current_user: User = Depends(require_admin),
):
    return await store.stats()
