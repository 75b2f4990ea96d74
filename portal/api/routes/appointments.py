import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.deps import get_current_user, get_optional_user, get_session, require_admin
from portal.api.schemas.appointment import BookAppointmentRequest, UpdateAppointmentRequest
from portal.core.config import settings
from portal.models.appointment import (
    Appointment,
    AppointmentCreate,
    AppointmentPublic,
    AppointmentStatus,
    AppointmentUpdate,
)
from portal.models.user import User
from portal.services.appointment_service import (
    cancel_appointment,
    create_appointment,
    list_appointments,
    list_appointments_for_user,
    update_appointment,
)
from portal.services.email_service import send_appointment_request_email

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/appointments", tags=["appointments"])


def _to_public(a: Appointment) -> AppointmentPublic:
    return AppointmentPublic.model_validate(a, from_attributes=True)


@router.post("", response_model=AppointmentPublic, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    body: BookAppointmentRequest,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_session),
    current_user: User | None = Depends(get_optional_user),
) -> AppointmentPublic:
    """Public booking; a valid bearer token links the appointment to the account."""
    data = AppointmentCreate(**body.model_dump())
    appointment = await create_appointment(
        session, data, user_id=current_user.id if current_user else None
    )
    if settings.email_enabled:
        background_tasks.add_task(send_appointment_request_email, appointment)
    return _to_public(appointment)


@router.get("", response_model=list[AppointmentPublic])
async def list_my_appointments(
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> list[AppointmentPublic]:
    appointments = await list_appointments_for_user(session, current_user.id)
    return [_to_public(a) for a in appointments]


@router.get("/admin", response_model=list[AppointmentPublic])
async def list_all_appointments_admin(
    statut: AppointmentStatus | None = Query(None),
    date_param: str | None = Query(None, alias="date"),
    session: AsyncSession = Depends(get_session),
    _admin: User = Depends(require_admin),
) -> list[AppointmentPublic]:
    appointments = await list_appointments(session, statut=statut, day=date_param)
    return [_to_public(a) for a in appointments]


@router.patch("/{appointment_id}/cancel", response_model=AppointmentPublic)
async def cancel_my_appointment(
    appointment_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> AppointmentPublic:
    appointment = await cancel_appointment(session, appointment_id, current_user)
    return _to_public(appointment)


@router.patch("/{appointment_id}", response_model=AppointmentPublic)
async def update_appointment_admin(
    appointment_id: int,
    body: UpdateAppointmentRequest,
    session: AsyncSession = Depends(get_session),
    admin: User = Depends(require_admin),
) -> AppointmentPublic:
    changes = AppointmentUpdate(**body.model_dump(exclude_unset=True))
    appointment = await update_appointment(session, appointment_id, changes)
    logger.info("Appointment %s updated by %s", appointment_id, admin.email)
    return _to_public(appointment)
