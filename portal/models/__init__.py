from portal.models.user import User, UserCreate, UserPublic, UserRole
from portal.models.refresh_token import RefreshToken
from portal.models.slot import Slot, SlotPublic
from portal.models.appointment import (
    Appointment,
    AppointmentCreate,
    AppointmentPublic,
    AppointmentStatus,
    AppointmentUpdate,
)
from portal.models.notification import Notification, NotificationPublic, NotificationType

__all__ = [
    "User",
    "UserCreate",
    "UserPublic",
    "UserRole",
    "RefreshToken",
    "Slot",
    "SlotPublic",
    "Appointment",
    "AppointmentCreate",
    "AppointmentPublic",
    "AppointmentStatus",
    "AppointmentUpdate",
    "Notification",
    "NotificationPublic",
    "NotificationType",
]
