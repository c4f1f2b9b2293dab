"""Forward recomputation of archived fuel summaries."""

from dataclasses import replace

from bridge_log.domain.logbook import DayRecord
from bridge_log.services.calendar import previous_day
from bridge_log.services.fuel import carry_from_record, compute_fuel_for_day, summarize


def recompute_history(history: list[DayRecord]) -> list[DayRecord]:
    """Re-derive every day's fuel summary, oldest day first.

    Each day is seeded from the already recomputed previous calendar day, so an
    edit propagates to every later day and leaves earlier days untouched. Records
    are updated in place by position; only summaries change, even when several
    records share a date. The carry comes from the first record of the previous
    day in ``history``, the same record ``carry_into`` picks.
    """
    recomputed = list(history)
    first_index: dict[str, int] = {}
    for index, day in enumerate(history):
        first_index.setdefault(day.date, index)

    for index in sorted(range(len(history)), key=lambda i: history[i].date):
        day = recomputed[index]
        previous = first_index.get(previous_day(day.date))
        carry = carry_from_record(
            recomputed[previous] if previous is not None else None
        )
        fuel = compute_fuel_for_day(day.entries, carry)
        recomputed[index] = replace(day, fuel_summary=summarize(fuel))

    return recomputed
