import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.config import settings
from portal.core.dates import to_calendar_date
from portal.core.errors import InvalidArgument, NotFound
from portal.models.appointment import ACTIVE_STATUSES, Appointment
from portal.models.slot import Slot

logger = logging.getLogger(__name__)


@dataclass
class CloseResult:
    closed_count: int
    closed_labels: list[str]


def _labels_or_default(labels: list[str] | None) -> list[str]:
    return list(labels) if labels is not None else settings.slot_labels_list


def compute_open_labels(labels: Iterable[str], records: Iterable[Slot]) -> list[str]:
    """Fixed labels, in order, minus those closed by any record.

    Several records for one label are tolerated: a single closed one is enough.
    """
    closed = {r.heure for r in records if r.ferme}
    return [label for label in labels if label not in closed]


def validate_labels(heures: Iterable[str], labels: list[str]) -> list[str]:
    """Trim and dedupe requested labels; every one must belong to ``labels``."""
    requested: list[str] = []
    for heure in heures:
        h = heure.strip() if isinstance(heure, str) else heure
        if h not in requested:
            requested.append(h)
    if not requested:
        raise InvalidArgument("At least one time label is required")
    unknown = [h for h in requested if h not in labels]
    if unknown:
        raise InvalidArgument(
            f"Unknown time label(s): {', '.join(map(str, unknown))}. Allowed: {', '.join(labels)}"
        )
    return requested


async def _slots_on(session: AsyncSession, d: date) -> list[Slot]:
    result = await session.execute(select(Slot).where(Slot.date == d))
    return list(result.scalars().all())


async def list_slots(
    session: AsyncSession, day: date | datetime | str | None = None, ferme: bool | None = None
) -> list[Slot]:
    q = select(Slot).order_by(Slot.date, Slot.heure)
    if day is not None:
        q = q.where(Slot.date == to_calendar_date(day))
    if ferme is not None:
        q = q.where(Slot.ferme == ferme)
    result = await session.execute(q)
    return list(result.scalars().all())


async def close_slots(
    session: AsyncSession,
    day: date | datetime | str,
    heures: Iterable[str],
    reason: str | None = None,
    labels: list[str] | None = None,
) -> CloseResult:
    """Close the given labels for a date.

    Everything is validated before the first write. Labels already closed are
    skipped; an existing open row is flipped to closed.
    """
    labels = _labels_or_default(labels)
    d = to_calendar_date(day)
    requested = validate_labels(heures, labels)
    motif = (reason or "").strip() or None

    existing = {s.heure: s for s in await _slots_on(session, d)}
    closed_count = 0
    for heure in requested:
        slot = existing.get(heure)
        if slot is not None and slot.ferme:
            logger.debug("Slot %s %s already closed, skipping", d, heure)
            continue
        if slot is None:
            slot = Slot(date=d, heure=heure)
            existing[heure] = slot
        slot.ferme = True
        slot.motif_fermeture = motif
        session.add(slot)
        closed_count += 1
    await session.flush()

    closed = {h for h, s in existing.items() if s.ferme}
    closed_labels = [label for label in labels if label in closed]
    logger.info("Closed %d slot(s) on %s (reason=%r); closed now: %s", closed_count, d, motif, closed_labels)
    return CloseResult(closed_count=closed_count, closed_labels=closed_labels)


async def reopen_slot(session: AsyncSession, slot_id: int) -> None:
    """Delete the slot row, returning the label to its implicit open state."""
    slot = await session.get(Slot, slot_id)
    if slot is None:
        raise NotFound(f"Slot {slot_id} not found")
    d, heure = slot.date, slot.heure
    await session.delete(slot)
    await session.flush()
    logger.info("Reopened slot %s %s (id=%s)", d, heure, slot_id)


async def get_closed_labels(session: AsyncSession, day: date | datetime | str) -> set[str]:
    d = to_calendar_date(day)
    return {s.heure for s in await _slots_on(session, d) if s.ferme}


async def is_slot_closed(session: AsyncSession, day: date | datetime | str, heure: str) -> bool:
    return heure in await get_closed_labels(session, day)


async def get_available_labels(
    session: AsyncSession, day: date | datetime | str, labels: list[str] | None = None
) -> list[str]:
    d = to_calendar_date(day)
    return compute_open_labels(_labels_or_default(labels), await _slots_on(session, d))


async def get_booked_labels(session: AsyncSession, day: date | datetime | str) -> set[str]:
    """Labels held by pending or confirmed appointments on that date."""
    d = to_calendar_date(day)
    result = await session.execute(
        select(Appointment.heure).where(
            Appointment.date == d,
            Appointment.statut.in_(ACTIVE_STATUSES),
        )
    )
    return {row[0] for row in result.all()}
