"""Fuel accounting over the fuel odometer readings of a day.

The odometer records litres remaining. A falling reading is fuel burned since
the previous reading; a rising reading is a refuel, whose consumption cannot be
derived from the odometer alone, so it is reported as unknown and excluded
from the day's total.
"""

import math

from bridge_log.domain.fuel import FuelComputation
from bridge_log.domain.logbook import DayRecord, FuelSummary, LogEntry
from bridge_log.services.calendar import previous_day


def parse_number_loose(value: object) -> float | None:
    """Parse an odometer field, ignoring thousands separators.

    Blank or non-numeric input yields ``None`` (no reading).
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def compute_fuel_for_day(
    entries: list[LogEntry], prior_carry: float | None
) -> FuelComputation:
    """Compute per-entry and total fuel used for newest-first ``entries``.

    The total is rounded to 2 decimal places; per-entry values are not.
    """
    carry = prior_carry
    used_sum = 0.0
    chronological_used: list[float | None] = []

    for entry in reversed(entries):
        current = parse_number_loose(entry.total_fuel)
        used: float | None = None
        if current is not None and carry is not None:
            delta = carry - current
            if delta >= 0:
                used = delta
                used_sum += delta
        if current is not None:
            carry = current
        chronological_used.append(used)

    return FuelComputation(
        per_entry_used=list(reversed(chronological_used)),
        used_sum=round(used_sum, 2),
        last_total_fuel=carry if carry is not None else prior_carry,
    )


def summarize(computation: FuelComputation) -> FuelSummary:
    """Turn a computation into the summary stored with an archived day."""
    return FuelSummary(
        used_litres=computation.used_sum,
        last_total_fuel=computation.last_total_fuel,
    )


def last_total_fuel_from_entries(entries: list[LogEntry]) -> float | None:
    """Return the most recent valid odometer reading of newest-first ``entries``."""
    for entry in entries:
        reading = parse_number_loose(entry.total_fuel)
        if reading is not None:
            return reading
    return None


def carry_from_record(record: DayRecord | None) -> float | None:
    """Return the carry-forward a day hands to the next calendar day."""
    if record is None:
        return None
    summary = record.fuel_summary
    if summary is not None and summary.last_total_fuel is not None:
        return summary.last_total_fuel
    return last_total_fuel_from_entries(record.entries)


def carry_into(history: list[DayRecord], day_iso: str) -> float | None:
    """Return the carry for ``day_iso`` from the previous calendar day's record."""
    yesterday = previous_day(day_iso)
    record = next((day for day in history if day.date == yesterday), None)
    return carry_from_record(record)
