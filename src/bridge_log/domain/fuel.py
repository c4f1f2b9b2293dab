"""Fuel accounting domain models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FuelComputation:
    """Result of running the fuel accountant over one day's entries."""

    per_entry_used: list[float | None]
    used_sum: float
    last_total_fuel: float | None
