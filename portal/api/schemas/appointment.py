import datetime as dt

from pydantic import BaseModel, EmailStr, Field, field_validator

from portal.core.dates import to_calendar_date
from portal.models.appointment import AppointmentMotif, AppointmentStatus


class BookAppointmentRequest(BaseModel):
    nom: str = Field(min_length=1)
    prenom: str = Field(min_length=1)
    email: EmailStr
    telephone: str = Field(min_length=1)
    date: dt.date
    heure: str = Field(min_length=1)
    motif: AppointmentMotif
    description: str = Field(default="", max_length=500)

    @field_validator("date", mode="before")
    @classmethod
    def _calendar_date(cls, v: object) -> dt.date:
        return to_calendar_date(v)


class UpdateAppointmentRequest(BaseModel):
    statut: AppointmentStatus | None = None
    date: dt.date | None = None
    heure: str | None = None
    motif: AppointmentMotif | None = None
    description: str | None = Field(default=None, max_length=500)
    notes: str | None = None

    @field_validator("date", mode="before")
    @classmethod
    def _calendar_date(cls, v: object) -> dt.date | None:
        return None if v is None else to_calendar_date(v)
