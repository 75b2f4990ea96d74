from datetime import date, datetime

import pytest

from portal.core.config import DEFAULT_SLOT_LABELS
from portal.core.errors import InvalidArgument, NotFound
from portal.models import Slot
from portal.services.slot_service import (
    close_slots,
    compute_open_labels,
    get_available_labels,
    list_slots,
    reopen_slot,
)

LABELS = DEFAULT_SLOT_LABELS.split(",")
DAY = "2025-03-10"


def test_compute_open_labels_keeps_configured_order() -> None:
    records = [Slot(date=date(2025, 3, 10), heure="14:00", ferme=True)]
    open_labels = compute_open_labels(LABELS, records)
    assert "14:00" not in open_labels
    assert open_labels == [label for label in LABELS if label != "14:00"]


def test_compute_open_labels_tolerates_duplicate_records() -> None:
    d = date(2025, 3, 10)
    records = [
        Slot(date=d, heure="10:00", ferme=False),
        Slot(date=d, heure="10:00", ferme=True),
        Slot(date=d, heure="11:00", ferme=False),
    ]
    open_labels = compute_open_labels(LABELS, records)
    assert "10:00" not in open_labels
    assert "11:00" in open_labels


async def test_fresh_registry_reports_every_label_open(session) -> None:
    assert await get_available_labels(session, DAY) == LABELS
    assert await get_available_labels(session, date(2031, 12, 31)) == LABELS
    assert await list_slots(session) == []


async def test_close_then_list_returns_the_closed_record(session) -> None:
    result = await close_slots(session, DAY, ["15:00"], reason="Audience")
    assert result.closed_count == 1
    assert result.closed_labels == ["15:00"]

    slots = await list_slots(session, day=DAY, ferme=True)
    assert len(slots) == 1
    assert slots[0].heure == "15:00"
    assert slots[0].motif_fermeture == "Audience"
    assert slots[0].date == date(2025, 3, 10)


async def test_closing_twice_is_idempotent(session) -> None:
    await close_slots(session, DAY, ["09:00"])
    second = await close_slots(session, DAY, ["09:00", "09:00"])
    assert second.closed_count == 0
    assert second.closed_labels == ["09:00"]
    assert len(await list_slots(session, day=DAY)) == 1


async def test_closed_labels_accumulate_in_configured_order(session) -> None:
    await close_slots(session, DAY, ["16:00"])
    result = await close_slots(session, DAY, ["09:30", "16:00"])
    assert result.closed_count == 1
    assert result.closed_labels == ["09:30", "16:00"]


async def test_close_reopen_round_trip_restores_availability(session) -> None:
    await close_slots(session, DAY, ["10:30"])
    assert "10:30" not in await get_available_labels(session, DAY)

    (slot,) = await list_slots(session, day=DAY)
    await reopen_slot(session, slot.id)

    assert await get_available_labels(session, DAY) == LABELS
    assert await list_slots(session) == []


async def test_reopen_unknown_slot_raises_not_found(session) -> None:
    await close_slots(session, DAY, ["11:00"])
    with pytest.raises(NotFound):
        await reopen_slot(session, 9999)
    assert [s.heure for s in await list_slots(session)] == ["11:00"]


async def test_empty_label_set_is_rejected_without_writes(session) -> None:
    with pytest.raises(InvalidArgument):
        await close_slots(session, DAY, [])
    assert await list_slots(session) == []


async def test_one_unknown_label_rejects_the_whole_call(session) -> None:
    with pytest.raises(InvalidArgument):
        await close_slots(session, DAY, ["09:00", "12:15"])
    assert await list_slots(session) == []


async def test_malformed_date_is_rejected(session) -> None:
    with pytest.raises(InvalidArgument):
        await close_slots(session, "10/03/2025", ["09:00"])


async def test_time_of_day_is_discarded_from_dates(session) -> None:
    await close_slots(session, "2025-03-10T23:30:00.000Z", ["14:30"])
    assert "14:30" not in await get_available_labels(session, datetime(2025, 3, 10, 8, 0))
    assert "14:30" in await get_available_labels(session, "2025-03-11")


async def test_reason_is_trimmed_and_blank_becomes_none(session) -> None:
    await close_slots(session, DAY, ["09:00"], reason="  Formation  ")
    await close_slots(session, DAY, ["09:30"], reason="   ")
    by_label = {s.heure: s for s in await list_slots(session, day=DAY)}
    assert by_label["09:00"].motif_fermeture == "Formation"
    assert by_label["09:30"].motif_fermeture is None


async def test_open_record_is_flipped_to_closed(session) -> None:
    session.add(Slot(date=date(2025, 3, 10), heure="17:00", ferme=False))
    await session.flush()
    assert "17:00" in await get_available_labels(session, DAY)

    result = await close_slots(session, DAY, ["17:00"], reason="Fermeture")
    assert result.closed_count == 1
    slots = await list_slots(session, day=DAY)
    assert len(slots) == 1
    assert slots[0].ferme is True
    assert slots[0].motif_fermeture == "Fermeture"


async def test_list_filters_by_date_and_state(session) -> None:
    await close_slots(session, "2025-03-10", ["09:00"])
    await close_slots(session, "2025-03-11", ["09:00", "10:00"])
    session.add(Slot(date=date(2025, 3, 12), heure="11:00", ferme=False))
    await session.flush()

    assert len(await list_slots(session)) == 4
    assert len(await list_slots(session, day="2025-03-11")) == 2
    assert [s.heure for s in await list_slots(session, ferme=False)] == ["11:00"]
    assert await list_slots(session, day="2025-04-01", ferme=True) == []


async def test_custom_label_set_is_honoured(session) -> None:
    labels = ["08:00", "08:30"]
    with pytest.raises(InvalidArgument):
        await close_slots(session, DAY, ["09:00"], labels=labels)
    result = await close_slots(session, DAY, ["08:30"], labels=labels)
    assert result.closed_labels == ["08:30"]
    assert await get_available_labels(session, DAY, labels=labels) == ["08:00"]


async def test_formation_scenario(session) -> None:
    await close_slots(session, "2025-03-10", ["09:00", "09:30"], reason="Formation")

    available = await get_available_labels(session, "2025-03-10")
    assert "09:00" not in available and "09:30" not in available
    assert len(available) == 11

    closed = await list_slots(session, day="2025-03-10", ferme=True)
    assert len(closed) == 2
    assert {s.motif_fermeture for s in closed} == {"Formation"}
