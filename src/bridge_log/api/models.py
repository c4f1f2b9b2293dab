"""Pydantic models for logbook API payloads."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from bridge_log.domain.logbook import (
    EditScope,
    EntryDraft,
    EntryKey,
    LogEntry,
    MovementKind,
    PositionDraft,
    VesselDetails,
    VesselMode,
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EntryFields(_CamelModel):
    """Observation fields shared by new and edited entries."""

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

    def to_draft(self) -> EntryDraft:
        return EntryDraft(**self.model_dump(include=set(EntryFields.model_fields)))


class EntryKeyModel(_CamelModel):
    """Composite identity of an entry."""

    date: str
    time: str
    position: str

    def to_key(self) -> EntryKey:
        return EntryKey(date=self.date, time=self.time, position=self.position)


class LogEntryModel(EntryFields):
    """A complete entry, used to replace an existing one."""

    date: str
    time: str
    position: str

    def to_entry(self) -> LogEntry:
        return LogEntry(**self.model_dump())


class EditEntryRequest(_CamelModel):
    """Replace an entry in the live log or an archived day."""

    scope: EditScope
    day: str
    key: EntryKeyModel
    entry: LogEntryModel


class MovementRequest(_CamelModel):
    kind: MovementKind


class NoteRequest(_CamelModel):
    text: str


class PositionRequest(_CamelModel):
    """Position scratch fields in degrees and minutes."""

    lat_deg: str = ""
    lat_min: str = ""
    lat_hem: Literal["N", "S"] = "S"
    lon_deg: str = ""
    lon_min: str = ""
    lon_hem: Literal["E", "W"] = "E"

    def to_draft(self) -> PositionDraft:
        return PositionDraft(**self.model_dump())


class CoordinatesRequest(_CamelModel):
    """A geolocation fix."""

    lat: float = Field(ge=-90.0, le=90.0)
    lon: float = Field(ge=-180.0, le=180.0)


class VesselRequest(_CamelModel):
    """Vessel particulars."""

    name: str | None = None
    call_sign: str | None = None
    mmsi: str | None = None
    imo: str | None = None
    official_no: str | None = None
    master: str | None = None
    notes: str | None = None

    def to_details(self) -> VesselDetails:
        return VesselDetails(**self.model_dump())


class WatchkeeperRequest(_CamelModel):
    watchkeeper: str


class LiveDayRequest(_CamelModel):
    """Location and/or mode of the live day."""

    location: str | None = None
    mode: VesselMode | None = None
