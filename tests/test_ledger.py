"""Tests for running-log transitions."""

import pytest

from bridge_log.domain.logbook import (
    Coordinates,
    EditScope,
    EntryDraft,
    EntryKey,
    MovementKind,
    PositionDraft,
    VesselMode,
)
from bridge_log.services import ledger
from bridge_log.services.ledger import (
    DELETE_PROMPT,
    EntryNotFoundError,
    LedgerValidationError,
)
from tests.conftest import POSITION, FixedClock, make_day, make_entry, make_state


def test_add_entry_stamps_date_time_and_position(clock: FixedClock) -> None:
    state = make_state(position=POSITION, watchkeeper="Mate")

    new_state = ledger.add_entry(
        state, EntryDraft(wind_force="4", total_fuel="1,200"), clock
    )

    entry = new_state.log[0]
    assert entry.date == "2026-10-19"
    assert entry.time == "09:30"
    assert entry.position == "16°55'S / 145°46'E"
    assert entry.sea == "1–2 m"
    assert entry.watchkeeper == "Mate"
    assert entry.total_fuel == "1,200"
    assert state.log == []


def test_add_entry_keeps_explicit_sea_state(clock: FixedClock) -> None:
    state = make_state(position=POSITION)

    new_state = ledger.add_entry(
        state, EntryDraft(wind_force="4", sea="Slight"), clock
    )

    assert new_state.log[0].sea == "Slight"


def test_add_entry_prepends(clock: FixedClock) -> None:
    state = make_state(position=POSITION, log=[make_entry(time="07:00")])

    new_state = ledger.add_entry(state, EntryDraft(remarks="Noon"), clock)

    assert [entry.time for entry in new_state.log] == ["09:30", "07:00"]


def test_add_entry_requires_position(clock: FixedClock) -> None:
    state = make_state(position=PositionDraft(lat_deg="16", lon_deg="145"))

    with pytest.raises(LedgerValidationError):
        ledger.add_entry(state, EntryDraft(), clock)


def test_add_entry_rejects_non_numeric_fuel(clock: FixedClock) -> None:
    state = make_state(position=POSITION)

    with pytest.raises(LedgerValidationError, match="Total Fuel"):
        ledger.add_entry(state, EntryDraft(total_fuel="lots"), clock)


@pytest.mark.parametrize(
    ("wind_force", "expected"),
    [
        ("", "0 m"),
        ("0", "0 m"),
        ("6", "3–4 m"),
        ("12", ">14 m"),
        ("13", ""),
        ("4.5", ""),
    ],
)
def test_default_sea_state(wind_force: str, expected: str) -> None:
    assert ledger.default_sea_state(wind_force) == expected


def test_compose_position_needs_degrees_and_minutes() -> None:
    assert ledger.compose_position(POSITION) == "16°55'S / 145°46'E"
    assert ledger.compose_position(PositionDraft(lat_deg="16", lat_min="55")) == ""


def test_position_to_coordinates_signs_southern_and_western() -> None:
    coordinates = ledger.position_to_coordinates(
        PositionDraft(
            lat_deg="16", lat_min="30", lat_hem="S", lon_deg="10", lon_hem="W"
        )
    )

    assert coordinates == Coordinates(lat=-16.5, lon=-10.0)


def test_position_to_coordinates_rejects_missing_degrees() -> None:
    with pytest.raises(LedgerValidationError, match="degrees & minutes"):
        ledger.position_to_coordinates(PositionDraft(lat_deg="16", lon_deg="abc"))


@pytest.mark.parametrize(
    ("kind", "mode"),
    [
        (MovementKind.ANCHOR_DOWN, VesselMode.AT_ANCHOR),
        (MovementKind.ANCHOR_UP, VesselMode.UNDERWAY),
        (MovementKind.CAST_OFF, VesselMode.UNDERWAY),
        (MovementKind.ALONG, VesselMode.ALONG),
    ],
)
def test_movement_updates_mode(
    clock: FixedClock, kind: MovementKind, mode: VesselMode
) -> None:
    state = make_state(position=POSITION, watchkeeper="Mate")

    new_state = ledger.add_movement(state, kind, clock)

    entry = new_state.log[0]
    assert new_state.live_day.mode is mode
    assert entry.remarks == f"{kind.value} at 16°55'S / 145°46'E"
    assert entry.watchkeeper == "Mate"
    assert new_state.notes[0].text == entry.remarks
    assert new_state.notes[0].time == entry.time == "09:30"


def test_movement_falls_back_to_last_position_then_placeholder(
    clock: FixedClock,
) -> None:
    logged = make_state(log=[make_entry(position="17°00'S / 146°00'E")])
    empty = make_state()

    from_log = ledger.add_movement(logged, MovementKind.ANCHOR_DOWN, clock)
    unknown = ledger.add_movement(empty, MovementKind.ANCHOR_DOWN, clock)

    assert from_log.log[0].position == "17°00'S / 146°00'E"
    assert unknown.log[0].position == "(pos TBD)"
    assert unknown.log[0].remarks == "Anchor Down at (pos TBD)"


def test_add_note_rejects_blank_text(clock: FixedClock) -> None:
    state = make_state()

    noted = ledger.add_note(state, "  Pilot aboard ", clock)

    assert noted.notes[0].text == "Pilot aboard"
    with pytest.raises(LedgerValidationError):
        ledger.add_note(state, "   ", clock)


def test_today_views_filter_by_live_date() -> None:
    state = make_state(
        log=[make_entry(date="2026-10-19"), make_entry(date="2026-10-18")],
    )

    assert [entry.date for entry in ledger.todays_entries(state)] == ["2026-10-19"]


def test_edit_live_entry_replaces_it_wholesale() -> None:
    original = make_entry(total_fuel="900", remarks="Noon")
    state = make_state(log=[original])
    replacement = make_entry(total_fuel="890", remarks="Noon fix")

    new_state = ledger.edit_entry(
        state, EditScope.TODAY, "2026-10-19", original.key, replacement
    )

    assert new_state.log == [replacement]


def test_edit_rejects_bad_fuel_and_unknown_entries() -> None:
    original = make_entry(total_fuel="900")
    state = make_state(log=[original])

    with pytest.raises(LedgerValidationError):
        ledger.edit_entry(
            state,
            EditScope.TODAY,
            "2026-10-19",
            original.key,
            make_entry(total_fuel="nine hundred"),
        )
    with pytest.raises(EntryNotFoundError):
        ledger.edit_entry(
            state,
            EditScope.TODAY,
            "2026-10-19",
            EntryKey(date="2026-10-19", time="23:59", position=""),
            make_entry(),
        )
    with pytest.raises(EntryNotFoundError):
        ledger.edit_entry(
            state, EditScope.HISTORY, "2026-10-01", original.key, make_entry()
        )


def test_delete_asks_for_confirmation() -> None:
    entry = make_entry()
    state = make_state(log=[entry])
    prompts: list[str] = []

    def decline(prompt: str) -> bool:
        prompts.append(prompt)
        return False

    assert ledger.delete_entry(
        state, EditScope.TODAY, "2026-10-19", entry.key, decline
    ) is state
    assert prompts == [DELETE_PROMPT]

    deleted = ledger.delete_entry(
        state, EditScope.TODAY, "2026-10-19", entry.key, lambda _prompt: True
    )
    assert deleted.log == []


def test_delete_unknown_entry_raises_before_asking() -> None:
    state = make_state(history=[make_day("2026-10-18", ["1000"])])

    def never(_prompt: str) -> bool:
        raise AssertionError("confirmation should not be requested")

    with pytest.raises(EntryNotFoundError):
        ledger.delete_entry(
            state,
            EditScope.HISTORY,
            "2026-10-18",
            EntryKey(date="2026-10-18", time="23:00", position=""),
            never,
        )


def test_set_coordinates_rounds_and_labels() -> None:
    state = ledger.set_coordinates(make_state(), -16.923456, 145.766543)

    assert state.coordinates == Coordinates(lat=-16.9235, lon=145.7665)
    assert state.location_label == "-16.9235, 145.7665"


def test_apply_position_uses_typed_position() -> None:
    state = ledger.apply_position(make_state(position=POSITION))

    assert state.coordinates.lat == pytest.approx(-(16 + 55 / 60))
    assert state.coordinates.lon == pytest.approx(145 + 46 / 60)
    assert state.location_label == "-16.9167, 145.7667"


def test_set_live_day_leaves_unspecified_fields() -> None:
    state = make_state()

    moved = ledger.set_live_day(state, location="Port Douglas")
    moored = ledger.set_live_day(moved, mode=VesselMode.MOORED)

    assert moored.live_day.location == "Port Douglas"
    assert moored.live_day.mode is VesselMode.MOORED
    assert moored.live_day.date == "2026-10-19"
