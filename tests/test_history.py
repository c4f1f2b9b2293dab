"""Tests for archived-day fuel recomputation."""

from dataclasses import replace

from bridge_log.domain.logbook import EditScope, FuelSummary
from bridge_log.services import ledger
from bridge_log.services.history import recompute_history
from tests.conftest import make_day, make_state


def _three_days():  # type: ignore[no-untyped-def]
    return recompute_history(
        [
            make_day("2026-10-18", ["800", "750"]),
            make_day("2026-10-17", ["900", "850"]),
            make_day("2026-10-16", ["1000", "950"]),
        ]
    )


def test_recompute_chains_carry_across_days() -> None:
    history = _three_days()

    assert [day.date for day in history] == ["2026-10-18", "2026-10-17", "2026-10-16"]
    assert [day.fuel_summary for day in history] == [
        FuelSummary(used_litres=100.0, last_total_fuel=750.0),
        FuelSummary(used_litres=100.0, last_total_fuel=850.0),
        FuelSummary(used_litres=50.0, last_total_fuel=950.0),
    ]


def test_gap_day_is_not_seeded() -> None:
    history = recompute_history(
        [make_day("2026-10-18", ["800", "750"]), make_day("2026-10-16", ["1000"])]
    )

    assert history[0].fuel_summary == FuelSummary(
        used_litres=50.0, last_total_fuel=750.0
    )


def test_editing_an_old_day_changes_it_and_later_days_only() -> None:
    state = make_state(history=_three_days())
    middle = state.history[1]
    target = middle.entries[0]

    new_state = ledger.edit_entry(
        state,
        EditScope.HISTORY,
        "2026-10-17",
        target.key,
        replace(target, total_fuel="800"),
    )

    newest, edited, oldest = new_state.history
    assert oldest == state.history[2]
    assert edited.fuel_summary == FuelSummary(used_litres=150.0, last_total_fuel=800.0)
    # 800 carried in, 800 -> 750 still burns 50.
    assert newest.fuel_summary == FuelSummary(used_litres=50.0, last_total_fuel=750.0)


def test_deleting_every_entry_of_a_day_passes_the_carry_through() -> None:
    state = make_state(history=_three_days())
    for entry in list(state.history[1].entries):
        state = ledger.delete_entry(
            state, EditScope.HISTORY, "2026-10-17", entry.key, lambda _prompt: True
        )

    newest, emptied, _oldest = state.history
    assert emptied.entries == []
    assert emptied.fuel_summary == FuelSummary(used_litres=0.0, last_total_fuel=950.0)
    # 950 carried in, 950 -> 800 is a burn.
    assert newest.fuel_summary == FuelSummary(used_litres=200.0, last_total_fuel=750.0)


def test_recompute_is_stable() -> None:
    history = _three_days()

    assert recompute_history(history) == history


def test_records_sharing_a_date_keep_their_own_entries() -> None:
    checkpoint = make_day("2026-10-19", ["900"])
    midnight = make_day("2026-10-19", ["900", "880"])
    state = make_state(
        history=recompute_history(
            [midnight, checkpoint, make_day("2026-10-18", ["1000", "950"])]
        )
    )
    target = state.history[2].entries[0]

    new_state = ledger.edit_entry(
        state,
        EditScope.HISTORY,
        "2026-10-18",
        target.key,
        replace(target, total_fuel="940"),
    )

    assert [len(day.entries) for day in new_state.history] == [2, 1, 1]
    assert new_state.history[0].entries == midnight.entries
    assert new_state.history[1].entries == checkpoint.entries
    assert new_state.history[0].fuel_summary == FuelSummary(
        used_litres=60.0, last_total_fuel=880.0
    )
    assert new_state.history[1].fuel_summary == FuelSummary(
        used_litres=40.0, last_total_fuel=900.0
    )


def test_carry_comes_from_the_newest_record_of_the_previous_day() -> None:
    history = recompute_history(
        [
            make_day("2026-10-20", ["850"]),
            make_day("2026-10-19", ["900", "870"]),
            make_day("2026-10-19", ["900"]),
        ]
    )

    assert history[0].fuel_summary == FuelSummary(
        used_litres=20.0, last_total_fuel=850.0
    )
