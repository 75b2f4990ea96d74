import datetime as dt
from datetime import UTC, datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


def _utc_naive_now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class Slot(SQLModel, table=True):
    """A (date, heure) bucket with an explicit state.

    Rows exist only for closed labels; no row means the label is open.
    """

    __tablename__ = "slots"
    __table_args__ = (UniqueConstraint("date", "heure", name="uq_slots_date_heure"),)

    id: int | None = Field(default=None, primary_key=True)
    date: dt.date = Field(index=True)
    heure: str = Field(max_length=5)
    ferme: bool = True
    motif_fermeture: str | None = None
    created_at: datetime = Field(default_factory=_utc_naive_now)


class SlotPublic(SQLModel):
    id: int
    date: dt.date
    heure: str
    ferme: bool
    motif_fermeture: str | None = None
