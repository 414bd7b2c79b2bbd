from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from playerstats.db.database import get_db
from playerstats.schemas.notifications import NotificationItem
from playerstats.schemas.settings import MessageResponse
from playerstats.services.notification_service import NotificationService

notifications_router = APIRouter()


@notifications_router.get("/notifications", response_model=List[NotificationItem])
async def list_notifications(
    status: str = Query(default="all"),
    limit: Optional[int] = Query(default=None, ge=1),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    return await NotificationService(db).list_notifications(status=status, limit=limit, offset=offset)


@notifications_router.put("/notification/{notification_id}", response_model=MessageResponse)
async def mark_notification_read(notification_id: int, db: AsyncSession = Depends(get_db)):
    await NotificationService(db).mark_read(notification_id)
    return MessageResponse(message="Notification status updated successfully")
