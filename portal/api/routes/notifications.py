from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.deps import get_current_user, get_session
from portal.models.notification import NotificationPublic
from portal.models.user import User
from portal.services.notification_service import list_notifications_for_user, mark_notification_read

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationPublic])
async def my_notifications(
    unread_only: bool = Query(False),
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> list[NotificationPublic]:
    notifications = await list_notifications_for_user(session, current_user.id, unread_only=unread_only)
    return [NotificationPublic.model_validate(n, from_attributes=True) for n in notifications]


@router.patch("/{notification_id}/read", response_model=NotificationPublic)
async def read_notification(
    notification_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> NotificationPublic:
    notification = await mark_notification_read(session, notification_id, current_user.id)
    return NotificationPublic.model_validate(notification, from_attributes=True)
