import logging
from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.config import settings
from portal.core.dates import format_fr, to_calendar_date
from portal.core.errors import Conflict, Forbidden, InvalidArgument, NotFound
from portal.models.appointment import (
    ACTIVE_STATUSES,
    Appointment,
    AppointmentCreate,
    AppointmentStatus,
    AppointmentUpdate,
)
from portal.models.notification import NotificationType
from portal.models.user import User
from portal.services.notification_service import create_notification
from portal.services.slot_service import is_slot_closed

logger = logging.getLogger(__name__)


def _check_label(heure: str) -> str:
    heure = heure.strip()
    if heure not in settings.slot_labels_list:
        raise InvalidArgument(f"Unknown time label: {heure}")
    return heure


async def _find_active_appointment(
    session: AsyncSession, d: date, heure: str, exclude_id: int | None = None
) -> Appointment | None:
    q = select(Appointment).where(
        Appointment.date == d,
        Appointment.heure == heure,
        Appointment.statut.in_(ACTIVE_STATUSES),
    )
    if exclude_id is not None:
        q = q.where(Appointment.id != exclude_id)
    result = await session.execute(q)
    return result.scalars().first()


async def create_appointment(
    session: AsyncSession, data: AppointmentCreate, user_id: int | None = None
) -> Appointment:
    heure = _check_label(data.heure)
    if await is_slot_closed(session, data.date, heure):
        raise Conflict("Ce créneau est fermé. Veuillez choisir un autre horaire.")
    if await _find_active_appointment(session, data.date, heure):
        raise Conflict("Ce créneau est déjà réservé. Veuillez choisir un autre horaire.")
    appointment = Appointment(
        user_id=user_id,
        nom=data.nom.strip(),
        prenom=data.prenom.strip(),
        email=data.email.strip().lower(),
        telephone=data.telephone.strip(),
        date=data.date,
        heure=heure,
        motif=data.motif.value,
        description=(data.description or "").strip(),
    )
    session.add(appointment)
    await session.flush()
    await session.refresh(appointment)
    logger.info("Appointment %s booked for %s %s (user_id=%s)", appointment.id, appointment.date, heure, user_id)
    return appointment


async def list_appointments_for_user(session: AsyncSession, user_id: int) -> list[Appointment]:
    q = (
        select(Appointment)
        .where(Appointment.user_id == user_id)
        .order_by(Appointment.date.desc(), Appointment.heure.desc())
    )
    result = await session.execute(q)
    return list(result.scalars().all())


async def list_appointments(
    session: AsyncSession,
    statut: AppointmentStatus | None = None,
    day: date | datetime | str | None = None,
) -> list[Appointment]:
    q = select(Appointment).order_by(Appointment.date, Appointment.heure)
    if statut is not None:
        q = q.where(Appointment.statut == statut.value)
    if day is not None:
        q = q.where(Appointment.date == to_calendar_date(day))
    result = await session.execute(q)
    return list(result.scalars().all())


async def get_appointment(session: AsyncSession, appointment_id: int) -> Appointment:
    appointment = await session.get(Appointment, appointment_id)
    if appointment is None:
        raise NotFound("Rendez-vous non trouvé")
    return appointment


def _owned_by(appointment: Appointment, user: User) -> bool:
    if appointment.user_id is not None:
        return appointment.user_id == user.id
    # Booked without an account: match on the e-mail used
    return appointment.email.lower() == user.email.lower()


async def cancel_appointment(session: AsyncSession, appointment_id: int, user: User) -> Appointment:
    appointment = await get_appointment(session, appointment_id)
    if not _owned_by(appointment, user):
        raise Forbidden("Vous n'avez pas l'autorisation d'annuler ce rendez-vous")
    if appointment.statut == AppointmentStatus.annule.value:
        raise InvalidArgument("Ce rendez-vous est déjà annulé")
    if appointment.statut == AppointmentStatus.termine.value:
        raise InvalidArgument("Impossible d'annuler un rendez-vous déjà terminé")

    old_statut = appointment.statut
    appointment.statut = AppointmentStatus.annule.value
    session.add(appointment)
    await session.flush()
    logger.info("Appointment %s cancelled by user %s", appointment.id, user.id)

    if appointment.user_id is not None:
        await create_notification(
            session,
            user_id=appointment.user_id,
            type_=NotificationType.appointment_cancelled,
            titre="Rendez-vous annulé",
            message=(
                f"Vous avez annulé votre rendez-vous du {format_fr(appointment.date)} "
                f"à {appointment.heure}."
            ),
            details={
                "appointment_id": appointment.id,
                "date": appointment.date.isoformat(),
                "heure": appointment.heure,
                "old_statut": old_statut,
                "new_statut": appointment.statut,
            },
        )
    return appointment


def _describe_change(
    appointment: Appointment, old_statut: str, old_date: date, old_heure: str, changes: AppointmentUpdate
) -> tuple[NotificationType, str, str] | None:
    """Pick the single notification that best describes an admin edit."""
    when = f"{format_fr(appointment.date)} à {appointment.heure}"
    if changes.statut is not None and changes.statut.value != old_statut:
        if changes.statut == AppointmentStatus.confirme and old_statut == AppointmentStatus.en_attente.value:
            return (
                NotificationType.appointment_created,
                "Rendez-vous confirmé",
                f"Votre rendez-vous du {when} a été confirmé.",
            )
        if changes.statut == AppointmentStatus.annule:
            return (
                NotificationType.appointment_cancelled,
                "Rendez-vous annulé",
                f"Votre rendez-vous du {when} a été annulé.",
            )
        return (
            NotificationType.appointment_updated,
            "Rendez-vous modifié",
            f'Le statut de votre rendez-vous a été modifié de "{old_statut}" à "{changes.statut.value}".',
        )
    date_changed = changes.date is not None and changes.date != old_date
    heure_changed = changes.heure is not None and appointment.heure != old_heure
    if date_changed and heure_changed:
        return (
            NotificationType.appointment_updated,
            "Rendez-vous modifié",
            f"Votre rendez-vous a été reprogrammé. Nouvelle date et heure : {when}.",
        )
    if date_changed:
        return (
            NotificationType.appointment_updated,
            "Rendez-vous modifié",
            f"Votre rendez-vous a été reprogrammé. Nouvelle date : {when}.",
        )
    if heure_changed:
        return (
            NotificationType.appointment_updated,
            "Rendez-vous modifié",
            f"L'heure de votre rendez-vous a été modifiée. Nouvelle heure : {appointment.heure} "
            f"(date : {format_fr(appointment.date)}).",
        )
    if changes.motif is not None or changes.description is not None or changes.notes is not None:
        return (
            NotificationType.appointment_updated,
            "Rendez-vous modifié",
            f"Votre rendez-vous du {when} a été modifié par l'administrateur.",
        )
    return None


async def update_appointment(
    session: AsyncSession, appointment_id: int, changes: AppointmentUpdate
) -> Appointment:
    appointment = await get_appointment(session, appointment_id)
    old_statut, old_date, old_heure = appointment.statut, appointment.date, appointment.heure

    if changes.heure is not None:
        changes.heure = _check_label(changes.heure)
    if changes.statut is not None:
        appointment.statut = changes.statut.value
    if changes.date is not None:
        appointment.date = changes.date
    if changes.heure is not None:
        appointment.heure = changes.heure
    if changes.motif is not None:
        appointment.motif = changes.motif.value
    if changes.description is not None:
        appointment.description = changes.description.strip()
    if changes.notes is not None:
        appointment.notes = changes.notes.strip()

    moved = (appointment.date, appointment.heure) != (old_date, old_heure)
    reactivated = old_statut not in ACTIVE_STATUSES
    # A move or a reactivation claims the slot again, like a new booking
    if appointment.statut in ACTIVE_STATUSES and (moved or reactivated):
        if await is_slot_closed(session, appointment.date, appointment.heure):
            raise Conflict("Ce créneau est fermé. Veuillez choisir un autre horaire.")
        if await _find_active_appointment(session, appointment.date, appointment.heure, exclude_id=appointment.id):
            raise Conflict("Ce créneau est déjà réservé. Veuillez choisir un autre horaire.")

    session.add(appointment)
    await session.flush()
    logger.info(
        "Appointment %s updated: statut %s -> %s, %s %s -> %s %s",
        appointment.id, old_statut, appointment.statut, old_date, old_heure, appointment.date, appointment.heure,
    )

    if appointment.user_id is not None:
        described = _describe_change(appointment, old_statut, old_date, old_heure, changes)
        if described:
            type_, titre, message = described
            await create_notification(
                session,
                user_id=appointment.user_id,
                type_=type_,
                titre=titre,
                message=message,
                details={
                    "appointment_id": appointment.id,
                    "date": appointment.date.isoformat(),
                    "heure": appointment.heure,
                    "old_statut": old_statut,
                    "new_statut": appointment.statut,
                    "old_date": old_date.isoformat(),
                    "old_heure": old_heure,
                },
            )
    return appointment
