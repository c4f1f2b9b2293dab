"""Calendar helpers for the ledger's local day."""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo


class Clock(Protocol):
    """Source of the current local time."""

    def now(self) -> datetime:
        """Return the current timezone-aware datetime."""


@dataclass(frozen=True)
class SystemClock(Clock):
    """Wall clock in a configured timezone."""

    timezone_name: str = "UTC"

    def now(self) -> datetime:
        """Return the current time in the configured timezone."""
        return datetime.now(tz=ZoneInfo(self.timezone_name))


def today_iso(clock: Clock) -> str:
    """Return the local calendar date as YYYY-MM-DD."""
    return clock.now().date().isoformat()


def now_hhmm(clock: Clock) -> str:
    """Return the local wall time as HH:MM."""
    return clock.now().strftime("%H:%M")


def now_timestamp(clock: Clock) -> str:
    """Return the current instant as an ISO-8601 string."""
    return clock.now().isoformat()


def previous_day(day_iso: str) -> str:
    """Return the calendar day before ``day_iso``.

    Unparseable input yields an empty string, which never matches a record.
    """
    try:
        day = date.fromisoformat(day_iso)
    except ValueError:
        return ""
    return (day - timedelta(days=1)).isoformat()


def pretty_date(day_iso: str) -> str:
    """Format a day for display, e.g. ``Mon, 19 Oct 2026``."""
    try:
        day = date.fromisoformat(day_iso)
    except ValueError:
        return day_iso
    return day.strftime("%a, %d %b %Y")
