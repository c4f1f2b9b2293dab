"""Domain models for the vessel logbook."""

from dataclasses import dataclass, field
from enum import StrEnum

WeatherSnapshot = dict[str, object]


class VesselMode(StrEnum):
    """Operating mode of the vessel for the live day."""

    ALONG = "Along"
    AT_ANCHOR = "@Anchor"
    UNDERWAY = "Underway"
    MOORED = "Moored"


class MovementKind(StrEnum):
    """Movement shortcuts that log a templated entry and note."""

    ALONG = "Along"
    CAST_OFF = "Cast Off"
    ANCHOR_DOWN = "Anchor Down"
    ANCHOR_UP = "Anchor Up"


class EditScope(StrEnum):
    """Where an entry being edited or deleted lives."""

    TODAY = "today"
    HISTORY = "history"


@dataclass(frozen=True)
class VesselDetails:
    """Particulars of the vessel keeping the log."""

    name: str | None = None
    call_sign: str | None = None
    mmsi: str | None = None
    imo: str | None = None
    official_no: str | None = None
    master: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class PositionDraft:
    """Position scratch fields as typed by the watchkeeper."""

    lat_deg: str = ""
    lat_min: str = ""
    lat_hem: str = "S"
    lon_deg: str = ""
    lon_min: str = ""
    lon_hem: str = "E"


@dataclass(frozen=True)
class Coordinates:
    """Decimal coordinates used for weather lookups."""

    lat: float | None = None
    lon: float | None = None


@dataclass(frozen=True)
class LiveDay:
    """The currently open day of the ledger."""

    date: str
    location: str = ""
    mode: VesselMode = VesselMode.ALONG


@dataclass(frozen=True)
class EntryKey:
    """Composite identity of a log entry."""

    date: str
    time: str
    position: str


@dataclass(frozen=True)
class EntryDraft:
    """User-supplied fields for a new log entry."""

    course_magnetic: str = ""
    course_gyro: str = ""
    course_steering: str = ""
    speed: str = ""
    wind_dir: str = ""
    wind_force: str = ""
    sea: str = ""
    sky: str = ""
    visibility: str = ""
    barometer: str = ""
    air_temp: str = ""
    sea_temp: str = ""
    engines: str = ""
    watchkeeper: str = ""
    remarks: str = ""
    total_fuel: str = ""


@dataclass(frozen=True)
class LogEntry:
    """One observation in the running log.

    ``total_fuel`` is the fuel odometer (litres remaining) kept as text, the
    same as every other observation field.
    """

    date: str
    time: str
    position: str
    course_magnetic: str = ""
    course_gyro: str = ""
    course_steering: str = ""
    speed: str = ""
    wind_dir: str = ""
    wind_force: str = ""
    sea: str = ""
    sky: str = ""
    visibility: str = ""
    barometer: str = ""
    air_temp: str = ""
    sea_temp: str = ""
    engines: str = ""
    watchkeeper: str = ""
    remarks: str = ""
    total_fuel: str = ""

    @property
    def key(self) -> EntryKey:
        return EntryKey(date=self.date, time=self.time, position=self.position)


@dataclass(frozen=True)
class Note:
    """Free-text timestamped annotation."""

    date: str
    time: str
    text: str


@dataclass(frozen=True)
class FuelSummary:
    """Derived fuel totals stored with an archived day."""

    used_litres: float | None = None
    last_total_fuel: float | None = None


@dataclass(frozen=True)
class DayRecord:
    """Archive of one calendar day."""

    date: str
    location: str = ""
    mode: VesselMode = VesselMode.ALONG
    vessel: VesselDetails = field(default_factory=VesselDetails)
    notes: list[Note] = field(default_factory=list)
    weather: WeatherSnapshot = field(default_factory=dict)
    entries: list[LogEntry] = field(default_factory=list)
    fuel_summary: FuelSummary | None = None


@dataclass(frozen=True)
class CanonicalState:
    """Root aggregate persisted as a whole for one identity.

    ``log``, ``notes`` and ``history`` are kept newest-first.
    """

    live_day: LiveDay
    vessel: VesselDetails = field(default_factory=VesselDetails)
    watchkeeper: str = ""
    notes: list[Note] = field(default_factory=list)
    log: list[LogEntry] = field(default_factory=list)
    history: list[DayRecord] = field(default_factory=list)
    position: PositionDraft = field(default_factory=PositionDraft)
    coordinates: Coordinates = field(default_factory=Coordinates)
    location_label: str = ""
    last_weather: WeatherSnapshot = field(default_factory=dict)
    updated_at: str | None = None
