from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


def _utc_naive_now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class NotificationType(str, Enum):
    appointment_created = "appointment_created"
    appointment_updated = "appointment_updated"
    appointment_cancelled = "appointment_cancelled"


class Notification(SQLModel, table=True):
    __tablename__ = "notifications"
    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    type: str
    titre: str
    message: str
    lien: str | None = None
    lu: bool = False
    details: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=_utc_naive_now)


class NotificationPublic(SQLModel):
    id: int
    type: str
    titre: str
    message: str
    lien: str | None = None
    lu: bool
    details: dict = {}
    created_at: datetime
