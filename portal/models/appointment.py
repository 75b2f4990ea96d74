import datetime as dt
from datetime import UTC, datetime
from enum import Enum

from sqlmodel import Field, SQLModel


def _utc_naive_now() -> datetime:
    """Naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


class AppointmentStatus(str, Enum):
    en_attente = "en_attente"
    confirme = "confirme"
    annule = "annule"
    termine = "termine"


# Statuses that hold the (date, heure) pair
ACTIVE_STATUSES = (AppointmentStatus.en_attente.value, AppointmentStatus.confirme.value)


class AppointmentMotif(str, Enum):
    consultation = "Consultation"
    dossier_administratif = "Dossier administratif"
    suivi_de_dossier = "Suivi de dossier"
    autre = "Autre"


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    id: int | None = Field(default=None, primary_key=True)
    user_id: int | None = Field(default=None, foreign_key="users.id", index=True)  # None for public bookings
    nom: str
    prenom: str
    email: str
    telephone: str
    # Joined to slots by (date, heure) equality only
    date: dt.date = Field(index=True)
    heure: str = Field(max_length=5)
    motif: str
    description: str = ""
    statut: str = Field(default=AppointmentStatus.en_attente.value, index=True)
    notes: str | None = None
    created_at: datetime = Field(default_factory=_utc_naive_now)


class AppointmentCreate(SQLModel):
    nom: str
    prenom: str
    email: str
    telephone: str
    date: dt.date
    heure: str
    motif: AppointmentMotif
    description: str = ""


class AppointmentUpdate(SQLModel):
    statut: AppointmentStatus | None = None
    date: dt.date | None = None
    heure: str | None = None
    motif: AppointmentMotif | None = None
    description: str | None = None
    notes: str | None = None


class AppointmentPublic(SQLModel):
    id: int
    user_id: int | None = None
    nom: str
    prenom: str
    email: str
    telephone: str
    date: dt.date
    heure: str
    motif: str
    description: str = ""
    statut: str
    notes: str | None = None
    created_at: datetime
