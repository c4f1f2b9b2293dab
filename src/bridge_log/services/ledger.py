"""Pure state transitions for the running log.

Every function takes the current state and returns a new one. Validation
happens before anything is built, so a rejected call leaves no trace.
"""

from collections.abc import Callable
from dataclasses import replace

from bridge_log.domain.fuel import FuelComputation
from bridge_log.domain.logbook import (
    CanonicalState,
    Coordinates,
    DayRecord,
    EditScope,
    EntryDraft,
    EntryKey,
    LiveDay,
    LogEntry,
    MovementKind,
    Note,
    PositionDraft,
    VesselDetails,
    VesselMode,
    WeatherSnapshot,
)
from bridge_log.services.calendar import Clock, now_hhmm
from bridge_log.services.fuel import (
    carry_into,
    compute_fuel_for_day,
    parse_number_loose,
)
from bridge_log.services.history import recompute_history

DELETE_PROMPT = "Delete this log entry? This cannot be undone."
UNKNOWN_POSITION = "(pos TBD)"

# Beaufort force -> (wind speed, probable wave height).
BEAUFORT: dict[int, tuple[str, str]] = {
    0: ("<1 kt", "0 m"),
    1: ("1–3 kt", "0–0.1 m"),
    2: ("4–6 kt", "0.1–0.5 m"),
    3: ("7–10 kt", "0.5–1.25 m"),
    4: ("11–16 kt", "1–2 m"),
    5: ("17–21 kt", "2–3 m"),
    6: ("22–27 kt", "3–4 m"),
    7: ("28–33 kt", "4–5.5 m"),
    8: ("34–40 kt", "5.5–7.5 m"),
    9: ("41–47 kt", "7–10 m"),
    10: ("48–55 kt", "9–12.5 m"),
    11: ("56–63 kt", "11.5–16 m"),
    12: ("64+ kt", ">14 m"),
}

_MOVEMENT_MODES = {
    MovementKind.ALONG: VesselMode.ALONG,
    MovementKind.CAST_OFF: VesselMode.UNDERWAY,
    MovementKind.ANCHOR_UP: VesselMode.UNDERWAY,
    MovementKind.ANCHOR_DOWN: VesselMode.AT_ANCHOR,
}


class LedgerError(ValueError):
    """Base error for rejected ledger operations."""


class LedgerValidationError(LedgerError):
    """User input failed validation; state was not changed."""


class EntryNotFoundError(LedgerError, LookupError):
    """No entry or archived day matches the requested key."""


def compose_position(position: PositionDraft) -> str:
    """Return ``DD°MM'H / DDD°MM'H`` or an empty string when incomplete."""
    lat = (
        f"{position.lat_deg}°{position.lat_min}'{position.lat_hem}"
        if position.lat_deg and position.lat_min and position.lat_hem
        else ""
    )
    lon = (
        f"{position.lon_deg}°{position.lon_min}'{position.lon_hem}"
        if position.lon_deg and position.lon_min and position.lon_hem
        else ""
    )
    return f"{lat} / {lon}" if lat and lon else ""


def position_to_coordinates(position: PositionDraft) -> Coordinates:
    """Convert degrees and minutes to decimal coordinates (S and W negative)."""
    lat_deg = parse_number_loose(position.lat_deg)
    lon_deg = parse_number_loose(position.lon_deg)
    lat_min = parse_number_loose(position.lat_min or "0")
    lon_min = parse_number_loose(position.lon_min or "0")
    if lat_deg is None or lon_deg is None or lat_min is None or lon_min is None:
        raise LedgerValidationError("Enter valid degrees & minutes")
    lat_sign = -1 if position.lat_hem == "S" else 1
    lon_sign = -1 if position.lon_hem == "W" else 1
    return Coordinates(
        lat=(lat_deg + lat_min / 60) * lat_sign,
        lon=(lon_deg + lon_min / 60) * lon_sign,
    )


def default_sea_state(wind_force: str) -> str:
    """Return the probable wave height for a Beaufort force, blank counts as 0."""
    force = parse_number_loose(wind_force or "0")
    if force is None or not force.is_integer():
        return ""
    match = BEAUFORT.get(int(force))
    return match[1] if match else ""


def validate_total_fuel(total_fuel: str) -> None:
    """Reject an odometer value that is neither blank nor numeric."""
    if total_fuel.strip() and parse_number_loose(total_fuel) is None:
        raise LedgerValidationError("Total Fuel must be a number (or blank)")


def todays_entries(state: CanonicalState) -> list[LogEntry]:
    return [entry for entry in state.log if entry.date == state.live_day.date]


def todays_notes(state: CanonicalState) -> list[Note]:
    return [note for note in state.notes if note.date == state.live_day.date]


def todays_fuel(state: CanonicalState) -> FuelComputation:
    """Compute the live day's fuel on demand; it is never stored."""
    carry = carry_into(state.history, state.live_day.date)
    return compute_fuel_for_day(todays_entries(state), carry)


def add_entry(state: CanonicalState, draft: EntryDraft, clock: Clock) -> CanonicalState:
    """Prepend a new observation stamped with the live date and current time."""
    position = compose_position(state.position)
    if not position:
        raise LedgerValidationError("Enter a position (degrees + minutes)")
    validate_total_fuel(draft.total_fuel)

    entry = LogEntry(
        date=state.live_day.date,
        time=now_hhmm(clock),
        position=position,
        course_magnetic=draft.course_magnetic,
        course_gyro=draft.course_gyro,
        course_steering=draft.course_steering,
        speed=draft.speed,
        wind_dir=draft.wind_dir,
        wind_force=draft.wind_force,
        sea=draft.sea or default_sea_state(draft.wind_force),
        sky=draft.sky,
        visibility=draft.visibility,
        barometer=draft.barometer,
        air_temp=draft.air_temp,
        sea_temp=draft.sea_temp,
        engines=draft.engines,
        watchkeeper=draft.watchkeeper or state.watchkeeper,
        remarks=draft.remarks,
        total_fuel=draft.total_fuel,
    )
    return replace(state, log=[entry, *state.log])


def add_movement(
    state: CanonicalState, kind: MovementKind, clock: Clock
) -> CanonicalState:
    """Log a movement as an entry plus a matching note and update the mode."""
    today = todays_entries(state)
    position = compose_position(state.position) or (
        today[0].position if today else UNKNOWN_POSITION
    )
    text = f"{kind.value} at {position}"
    time = now_hhmm(clock)
    entry = LogEntry(
        date=state.live_day.date,
        time=time,
        position=position,
        watchkeeper=state.watchkeeper,
        remarks=text,
    )
    note = Note(date=state.live_day.date, time=time, text=text)
    return replace(
        state,
        notes=[note, *state.notes],
        log=[entry, *state.log],
        live_day=replace(state.live_day, mode=_MOVEMENT_MODES[kind]),
    )


def add_note(state: CanonicalState, text: str, clock: Clock) -> CanonicalState:
    value = text.strip()
    if not value:
        raise LedgerValidationError("Note text is empty")
    note = Note(date=state.live_day.date, time=now_hhmm(clock), text=value)
    return replace(state, notes=[note, *state.notes])


def edit_entry(
    state: CanonicalState,
    scope: EditScope,
    day: str,
    key: EntryKey,
    replacement: LogEntry,
) -> CanonicalState:
    """Replace the first entry matching ``key`` wholesale.

    Edits to an archived day re-derive that day's and every later day's fuel
    summary.
    """
    validate_total_fuel(replacement.total_fuel)
    if scope is EditScope.TODAY:
        index = _require_index(state.log, key)
        log = list(state.log)
        log[index] = replacement
        return replace(state, log=log)

    day_index, record = _require_day(state.history, day)
    index = _require_index(record.entries, key)
    entries = list(record.entries)
    entries[index] = replacement
    return _with_archived_entries(state, day_index, record, entries)


def delete_entry(
    state: CanonicalState,
    scope: EditScope,
    day: str,
    key: EntryKey,
    confirm: Callable[[str], bool],
) -> CanonicalState:
    """Remove the first entry matching ``key`` once ``confirm`` agrees.

    A declined confirmation returns ``state`` unchanged.
    """
    if scope is EditScope.TODAY:
        index = _require_index(state.log, key)
        if not confirm(DELETE_PROMPT):
            return state
        log = list(state.log)
        del log[index]
        return replace(state, log=log)

    day_index, record = _require_day(state.history, day)
    index = _require_index(record.entries, key)
    if not confirm(DELETE_PROMPT):
        return state
    entries = list(record.entries)
    del entries[index]
    return _with_archived_entries(state, day_index, record, entries)


def set_position(state: CanonicalState, position: PositionDraft) -> CanonicalState:
    return replace(state, position=position)


def set_coordinates(state: CanonicalState, lat: float, lon: float) -> CanonicalState:
    """Store a geolocation fix, rounded to 4 decimals, and label it."""
    lat = round(lat, 4)
    lon = round(lon, 4)
    return replace(
        state,
        coordinates=Coordinates(lat=lat, lon=lon),
        location_label=f"{lat:.4f}, {lon:.4f}",
    )


def apply_position(state: CanonicalState) -> CanonicalState:
    """Use the typed position scratch fields as the weather coordinates."""
    coordinates = position_to_coordinates(state.position)
    return replace(
        state,
        coordinates=coordinates,
        location_label=f"{coordinates.lat:.4f}, {coordinates.lon:.4f}",
    )


def set_weather(state: CanonicalState, snapshot: WeatherSnapshot) -> CanonicalState:
    return replace(state, last_weather=dict(snapshot))


def set_vessel(state: CanonicalState, vessel: VesselDetails) -> CanonicalState:
    return replace(state, vessel=vessel)


def set_watchkeeper(state: CanonicalState, watchkeeper: str) -> CanonicalState:
    return replace(state, watchkeeper=watchkeeper)


def set_live_day(
    state: CanonicalState,
    location: str | None = None,
    mode: VesselMode | None = None,
) -> CanonicalState:
    """Update the live day's location and/or mode; the date is rollover's job."""
    live_day: LiveDay = state.live_day
    if location is not None:
        live_day = replace(live_day, location=location)
    if mode is not None:
        live_day = replace(live_day, mode=mode)
    return replace(state, live_day=live_day)


def _require_index(entries: list[LogEntry], key: EntryKey) -> int:
    for index, entry in enumerate(entries):
        if entry.key == key:
            return index
    raise EntryNotFoundError(
        f"No entry at {key.date} {key.time} ({key.position or 'no position'})"
    )


def _require_day(history: list[DayRecord], day: str) -> tuple[int, DayRecord]:
    for index, record in enumerate(history):
        if record.date == day:
            return index, record
    raise EntryNotFoundError(f"No archived day {day}")


def _with_archived_entries(
    state: CanonicalState,
    day_index: int,
    record: DayRecord,
    entries: list[LogEntry],
) -> CanonicalState:
    history = list(state.history)
    history[day_index] = replace(record, entries=entries)
    return replace(state, history=recompute_history(history))
