"""Tolerant conversion between stored JSON payloads and the canonical state.

``normalize`` accepts anything a JSON decoder can produce: the current
payload, a tagged backup envelope, or arbitrarily old or damaged state. Every
field is defaulted on its own, so one bad field never discards the rest.
"""

from dataclasses import dataclass

from bridge_log.domain.logbook import (
    CanonicalState,
    Coordinates,
    DayRecord,
    FuelSummary,
    LiveDay,
    LogEntry,
    Note,
    PositionDraft,
    VesselDetails,
    VesselMode,
)
from bridge_log.services.calendar import Clock, now_timestamp, today_iso

BACKUP_TAG = "Backup"
LEGACY_BACKUP_KIND = "BridgeLogProBackup"
DEFAULT_LOCATION_LABEL = "Cairns, QLD"

_ENTRY_FIELDS = {
    "course_gyro": "courseGyro",
    "course_steering": "courseSteering",
    "speed": "speed",
    "wind_dir": "windDir",
    "wind_force": "windForce",
    "sea": "sea",
    "sky": "sky",
    "visibility": "visibility",
    "barometer": "barometer",
    "air_temp": "airTemp",
    "sea_temp": "seaTemp",
    "engines": "engines",
    "remarks": "remarks",
    "total_fuel": "totalFuel",
}

_VESSEL_FIELDS = {
    "name": "name",
    "call_sign": "callSign",
    "mmsi": "mmsi",
    "imo": "imo",
    "official_no": "officialNo",
    "master": "master",
    "notes": "notes",
}


@dataclass(frozen=True)
class Invalid:
    """Input that cannot be turned into a state at all."""

    reason: str


def normalize(
    raw: object,
    clock: Clock,
    default_location_label: str = DEFAULT_LOCATION_LABEL,
) -> CanonicalState | Invalid:
    """Convert a decoded JSON value into a canonical state.

    Returns ``Invalid`` for non-object input and never raises. The result is
    stamped with the current instant, not any timestamp found in the input.
    """
    if isinstance(raw, CanonicalState):
        raw = to_payload(raw)
    if not isinstance(raw, dict):
        return Invalid("state is not an object")
    source = _unwrap_envelope(raw)
    if not isinstance(source, dict):
        return Invalid("backup payload is not an object")

    today = today_iso(clock)
    vessel = _vessel(source.get("vessel")) or VesselDetails()
    watchkeeper = _text(source.get("watchkeeper"))
    live_day = _live_day(source.get("daily"), today)

    log = [
        _entry(row, fallback_date=live_day.date, fallback_watchkeeper=watchkeeper)
        for row in _objects(source.get("log"))
    ]
    notes = [
        note
        for note in (
            _note(row, fallback_date=live_day.date)
            for row in _objects(source.get("notes"))
        )
        if note is not None
    ]
    history = [
        day
        for day in (
            _day_record(row, fallback_vessel=vessel)
            for row in _objects(source.get("history"))
        )
        if day is not None
    ]

    label = source.get("locLabel")
    return CanonicalState(
        live_day=live_day,
        vessel=vessel,
        watchkeeper=watchkeeper,
        notes=notes,
        log=log,
        history=history,
        position=_position(source.get("pos")),
        coordinates=_coordinates(source.get("coords")),
        location_label=label if isinstance(label, str) else default_location_label,
        last_weather=_weather(source.get("lastWeather")),
        updated_at=now_timestamp(clock),
    )


def default_state(
    clock: Clock, default_location_label: str = DEFAULT_LOCATION_LABEL
) -> CanonicalState:
    """Return the state of a brand new ledger."""
    return CanonicalState(
        live_day=LiveDay(date=today_iso(clock)),
        location_label=default_location_label,
        updated_at=now_timestamp(clock),
    )


def to_payload(state: CanonicalState) -> dict[str, object]:
    """Serialize a state into its stored JSON shape."""
    return {
        "vessel": _vessel_payload(state.vessel),
        "watchkeeper": state.watchkeeper,
        "notes": [_note_payload(note) for note in state.notes],
        "log": [entry_payload(entry) for entry in state.log],
        "history": [_day_payload(day) for day in state.history],
        "pos": {
            "latDeg": state.position.lat_deg,
            "latMin": state.position.lat_min,
            "latHem": state.position.lat_hem,
            "lonDeg": state.position.lon_deg,
            "lonMin": state.position.lon_min,
            "lonHem": state.position.lon_hem,
        },
        "daily": {
            "date": state.live_day.date,
            "location": state.live_day.location,
            "mode": state.live_day.mode.value,
        },
        "coords": {"lat": state.coordinates.lat, "lon": state.coordinates.lon},
        "locLabel": state.location_label,
        "lastWeather": dict(state.last_weather),
        "updatedAtISO": state.updated_at,
    }


def entry_payload(entry: LogEntry) -> dict[str, str]:
    """Serialize a log entry with its stored field names."""
    payload = {
        "date": entry.date,
        "time": entry.time,
        "position": entry.position,
        "courseMagnetic": entry.course_magnetic,
    }
    for attribute, key in _ENTRY_FIELDS.items():
        payload[key] = getattr(entry, attribute)
    payload["watchkeeper"] = entry.watchkeeper
    return payload


def fuel_summary_payload(summary: FuelSummary | None) -> dict[str, object] | None:
    if summary is None:
        return None
    return {
        "usedLitres": summary.used_litres,
        "lastTotalFuel": summary.last_total_fuel,
    }


def _unwrap_envelope(raw: dict[str, object]) -> object:
    if raw.get("tag") == BACKUP_TAG and "payload" in raw:
        return raw["payload"]
    if raw.get("kind") == LEGACY_BACKUP_KIND and raw.get("state"):
        return raw["state"]
    return raw


def _objects(value: object) -> list[dict[str, object]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _text(value: object, default: str = "") -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, int | float) and not isinstance(value, bool):
        return str(value)
    return default


def _optional_text(value: object) -> str | None:
    return value if isinstance(value, str) else None


def _number(value: object) -> float | None:
    if isinstance(value, int | float) and not isinstance(value, bool):
        return float(value)
    return None


def _mode(value: object) -> VesselMode:
    try:
        return VesselMode(value)
    except (TypeError, ValueError):
        return VesselMode.ALONG


def _vessel(value: object) -> VesselDetails | None:
    if not isinstance(value, dict):
        return None
    return VesselDetails(
        **{
            attribute: _optional_text(value.get(key))
            for attribute, key in _VESSEL_FIELDS.items()
        }
    )


def _live_day(value: object, today: str) -> LiveDay:
    if not isinstance(value, dict):
        return LiveDay(date=today)
    return LiveDay(
        date=_text(value.get("date")) or today,
        location=_text(value.get("location")),
        mode=_mode(value.get("mode")),
    )


def _entry(
    row: dict[str, object], fallback_date: str, fallback_watchkeeper: str = ""
) -> LogEntry:
    # Older backups stored the magnetic course as "courseTrue".
    course = row.get("courseMagnetic")
    if not isinstance(course, str):
        course = row.get("courseTrue")
    return LogEntry(
        date=_text(row.get("date")) or fallback_date,
        time=_text(row.get("time")),
        position=_text(row.get("position")),
        course_magnetic=course if isinstance(course, str) else "",
        watchkeeper=_text(row.get("watchkeeper"), fallback_watchkeeper),
        **{
            attribute: _text(row.get(key))
            for attribute, key in _ENTRY_FIELDS.items()
        },
    )


def _note(row: dict[str, object], fallback_date: str) -> Note | None:
    text = row.get("text")
    if not isinstance(text, str):
        return None
    return Note(
        date=_text(row.get("date")) or fallback_date,
        time=_text(row.get("time")),
        text=text,
    )


def _fuel_summary(value: object) -> FuelSummary | None:
    if not isinstance(value, dict):
        return None
    return FuelSummary(
        used_litres=_number(value.get("usedLitres")),
        last_total_fuel=_number(value.get("lastTotalFuel")),
    )


def _day_record(
    row: dict[str, object], fallback_vessel: VesselDetails
) -> DayRecord | None:
    day = row.get("date")
    if not isinstance(day, str):
        return None
    return DayRecord(
        date=day,
        location=_text(row.get("location")),
        mode=_mode(row.get("vesselMode")),
        vessel=_vessel(row.get("vessel")) or fallback_vessel,
        notes=[
            note
            for note in (
                _note(item, fallback_date=day) for item in _objects(row.get("notes"))
            )
            if note is not None
        ],
        weather=_weather(row.get("weather")),
        entries=[
            _entry(item, fallback_date=day)
            for item in _objects(row.get("runningLog"))
        ],
        fuel_summary=_fuel_summary(row.get("fuelSummary")),
    )


def _position(value: object) -> PositionDraft:
    if not isinstance(value, dict):
        return PositionDraft()
    lat_hem = value.get("latHem")
    lon_hem = value.get("lonHem")
    return PositionDraft(
        lat_deg=_text(value.get("latDeg")),
        lat_min=_text(value.get("latMin")),
        lat_hem=lat_hem if lat_hem in {"N", "S"} else "S",
        lon_deg=_text(value.get("lonDeg")),
        lon_min=_text(value.get("lonMin")),
        lon_hem=lon_hem if lon_hem in {"E", "W"} else "E",
    )


def _coordinates(value: object) -> Coordinates:
    if not isinstance(value, dict):
        return Coordinates()
    return Coordinates(lat=_number(value.get("lat")), lon=_number(value.get("lon")))


def _weather(value: object) -> dict[str, object]:
    return dict(value) if isinstance(value, dict) else {}


def _vessel_payload(vessel: VesselDetails) -> dict[str, str | None]:
    return {
        key: getattr(vessel, attribute) for attribute, key in _VESSEL_FIELDS.items()
    }


def _note_payload(note: Note) -> dict[str, str]:
    return {"date": note.date, "time": note.time, "text": note.text}


def _day_payload(day: DayRecord) -> dict[str, object]:
    payload: dict[str, object] = {
        "date": day.date,
        "location": day.location,
        "vesselMode": day.mode.value,
        "vessel": _vessel_payload(day.vessel),
        "notes": [_note_payload(note) for note in day.notes],
        "weather": dict(day.weather),
        "runningLog": [entry_payload(entry) for entry in day.entries],
    }
    summary = fuel_summary_payload(day.fuel_summary)
    if summary is not None:
        payload["fuelSummary"] = summary
    return payload
