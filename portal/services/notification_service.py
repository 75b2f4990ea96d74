import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.errors import NotFound
from portal.models.notification import Notification, NotificationType

logger = logging.getLogger(__name__)

APPOINTMENTS_LINK = "/client/rendez-vous"


async def create_notification(
    session: AsyncSession,
    user_id: int,
    type_: NotificationType,
    titre: str,
    message: str,
    lien: str | None = APPOINTMENTS_LINK,
    details: dict | None = None,
) -> Notification:
    notification = Notification(
        user_id=user_id,
        type=type_.value,
        titre=titre,
        message=message,
        lien=lien,
        details=details or {},
    )
    session.add(notification)
    await session.flush()
    await session.refresh(notification)
    logger.info("Notification %s created for user %s", type_.value, user_id)
    return notification


async def list_notifications_for_user(
    session: AsyncSession, user_id: int, unread_only: bool = False
) -> list[Notification]:
    q = (
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    if unread_only:
        q = q.where(Notification.lu == False)  # noqa: E712
    result = await session.execute(q)
    return list(result.scalars().all())


async def mark_notification_read(session: AsyncSession, notification_id: int, user_id: int) -> Notification:
    result = await session.execute(
        select(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == user_id,
        )
    )
    notification = result.scalar_one_or_none()
    if not notification:
        raise NotFound("Notification not found")
    notification.lu = True
    session.add(notification)
    await session.flush()
    return notification
