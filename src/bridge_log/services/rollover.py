"""Day rollover: archiving the live day into history."""

import logging
from dataclasses import replace

from bridge_log.domain.logbook import CanonicalState, DayRecord
from bridge_log.services.fuel import carry_into, compute_fuel_for_day, summarize
from bridge_log.services.ledger import todays_entries, todays_notes

_logger = logging.getLogger(__name__)


def snapshot_day(state: CanonicalState) -> DayRecord:
    """Build the archive record of the live day as it stands now."""
    day = state.live_day.date
    entries = todays_entries(state)
    fuel = compute_fuel_for_day(entries, carry_into(state.history, day))
    return DayRecord(
        date=day,
        location=state.live_day.location,
        mode=state.live_day.mode,
        vessel=state.vessel,
        notes=todays_notes(state),
        weather=dict(state.last_weather),
        entries=entries,
        fuel_summary=summarize(fuel),
    )


def save_day(state: CanonicalState) -> CanonicalState:
    """Archive the live day on demand without advancing the date.

    The day's notes leave the live note list; its entries stay in the log.
    """
    record = snapshot_day(state)
    return replace(
        state,
        history=[record, *state.history],
        notes=[note for note in state.notes if note.date != record.date],
    )


def roll_over(state: CanonicalState, today: str) -> tuple[CanonicalState, bool]:
    """Archive the live day and advance to ``today`` when the date has changed.

    Returns the new state and whether a rollover happened. Ticks on the same
    calendar date are no-ops.
    """
    if today == state.live_day.date:
        return state, False
    saved = save_day(state)
    _logger.info(
        "Rolled over day %s; live date is now %s", state.live_day.date, today
    )
    return replace(saved, live_day=replace(saved.live_day, date=today)), True
