from pydantic import BaseModel


class CloseSlotsRequest(BaseModel):
    # Raw string; the service normalizes it to a calendar date
    date: str
    heures: list[str]
    reason: str | None = None


class CloseSlotsResponse(BaseModel):
    closed_count: int
    closed_labels: list[str]


class AvailableSlotsResponse(BaseModel):
    date: str  # YYYY-MM-DD
    available: list[str]
    closed: list[str]
    booked: list[str]


class SlotLabelsResponse(BaseModel):
    labels: list[str]
