import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.deps import get_session, require_admin
from portal.api.schemas.slot import (
    AvailableSlotsResponse,
    CloseSlotsRequest,
    CloseSlotsResponse,
    SlotLabelsResponse,
)
from portal.core.config import settings
from portal.core.dates import to_calendar_date
from portal.models.slot import SlotPublic
from portal.models.user import User
from portal.services.slot_service import (
    close_slots,
    get_available_labels,
    get_booked_labels,
    get_closed_labels,
    list_slots,
    reopen_slot,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("/labels", response_model=SlotLabelsResponse)
async def slot_labels() -> SlotLabelsResponse:
    """The bookable time labels; UIs must enumerate these instead of a local copy."""
    return SlotLabelsResponse(labels=settings.slot_labels_list)


@router.get("/available", response_model=AvailableSlotsResponse)
async def available_slots(
    date_param: str = Query(..., alias="date"),
    session: AsyncSession = Depends(get_session),
) -> AvailableSlotsResponse:
    """Open labels for the date, in configured order.

    `booked` lists labels held by active appointments; they are reported but
    not removed from `available`.
    """
    d = to_calendar_date(date_param)
    labels = settings.slot_labels_list
    available = await get_available_labels(session, d, labels=labels)
    closed = await get_closed_labels(session, d)
    booked = await get_booked_labels(session, d)
    return AvailableSlotsResponse(
        date=d.isoformat(),
        available=available,
        closed=[label for label in labels if label in closed],
        booked=[label for label in labels if label in booked],
    )


@router.get("", response_model=list[SlotPublic])
async def get_slots(
    date_param: str | None = Query(None, alias="date"),
    closed: bool | None = Query(None),
    session: AsyncSession = Depends(get_session),
    _admin: User = Depends(require_admin),
) -> list[SlotPublic]:
    slots = await list_slots(session, day=date_param, ferme=closed)
    logger.debug("Listed %d slot(s) for date=%s closed=%s", len(slots), date_param, closed)
    return [SlotPublic.model_validate(s, from_attributes=True) for s in slots]


@router.post("", response_model=CloseSlotsResponse, status_code=status.HTTP_201_CREATED)
async def close_slots_route(
    body: CloseSlotsRequest,
    session: AsyncSession = Depends(get_session),
    admin: User = Depends(require_admin),
) -> CloseSlotsResponse:
    logger.info("Slot closure requested by %s: date=%s heures=%s", admin.email, body.date, body.heures)
    result = await close_slots(session, body.date, body.heures, reason=body.reason)
    return CloseSlotsResponse(closed_count=result.closed_count, closed_labels=result.closed_labels)


@router.delete("/{slot_id}")
async def reopen_slot_route(
    slot_id: int,
    session: AsyncSession = Depends(get_session),
    _admin: User = Depends(require_admin),
) -> dict:
    await reopen_slot(session, slot_id)
    return {"message": "Slot reopened"}
