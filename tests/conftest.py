"""Shared test fixtures."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from bridge_log.adapters.open_meteo_client import WeatherClient
from bridge_log.config import Settings
from bridge_log.containers import AppContainer
from bridge_log.domain.logbook import (
    CanonicalState,
    DayRecord,
    LiveDay,
    LogEntry,
    PositionDraft,
)
from bridge_log.services.logbook import LogbookRegistry, StateRepository
from bridge_log.services.schema import to_payload
from bridge_log.services.weather import WeatherService


@dataclass
class FixedClock:
    """Clock that only moves when told to."""

    current: datetime = field(
        default_factory=lambda: datetime(2026, 10, 19, 9, 30, tzinfo=ZoneInfo("UTC"))
    )

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current = self.current + timedelta(**kwargs)


@dataclass
class _ManualCall:
    delay: float
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class ManualScheduler:
    """Scheduler whose callbacks run only when the test flushes them."""

    calls: list[_ManualCall] = field(default_factory=list)

    def schedule(self, delay: float, callback: Callable[[], None]) -> _ManualCall:
        call = _ManualCall(delay=delay, callback=callback)
        self.calls.append(call)
        return call

    def pending(self) -> list[_ManualCall]:
        return [call for call in self.calls if not call.cancelled]

    def flush(self) -> int:
        ready = self.pending()
        self.calls = []
        for call in ready:
            call.callback()
        return len(ready)


@dataclass
class InMemoryStateRepository(StateRepository):
    """In-memory state repository for tests."""

    states: dict[str, object] = field(default_factory=dict)
    writes: list[tuple[str, CanonicalState]] = field(default_factory=list)
    fail_writes: bool = False
    fail_reads: bool = False

    def get_state(self, identity: str) -> object | None:
        if self.fail_reads:
            raise RuntimeError("database unavailable")
        return self.states.get(identity)

    def put_state(self, identity: str, state: CanonicalState) -> None:
        if self.fail_writes:
            raise RuntimeError("write rejected")
        self.writes.append((identity, state))
        self.states[identity] = to_payload(state)


@dataclass
class FakeWeatherClient(WeatherClient):
    """Fake Open-Meteo client with canned payloads."""

    current_payload: dict[str, object] = field(
        default_factory=lambda: {
            "current": {
                "temperature_2m": 27.4,
                "wind_speed_10m": 12.0,
                "wind_direction_10m": 135,
                "pressure_msl": 1014.2,
                "visibility": 24000,
                "weather_code": 2,
                "precipitation": 0.0,
                "relative_humidity_2m": 71,
                "cloud_cover": 40,
                "dew_point_2m": 21.5,
            }
        }
    )
    marine_payload: dict[str, object] = field(
        default_factory=lambda: {
            "current": {"wave_height": 1.2, "wave_period": 6.5, "wave_direction": 120}
        }
    )
    fail_current: bool = False
    fail_marine: bool = False
    calls: list[tuple[float, float]] = field(default_factory=list)

    async def fetch_current(self, lat: float, lon: float) -> dict[str, object]:
        self.calls.append((lat, lon))
        if self.fail_current:
            raise RuntimeError("Weather HTTP 503")
        return self.current_payload

    async def fetch_marine(self, lat: float, lon: float) -> dict[str, object]:
        if self.fail_marine:
            raise RuntimeError("Marine HTTP 500")
        return self.marine_payload


def make_entry(
    total_fuel: str = "",
    time: str = "08:00",
    date: str = "2026-10-19",
    position: str = "16°55'S / 145°46'E",
    **fields: str,
) -> LogEntry:
    return LogEntry(
        date=date, time=time, position=position, total_fuel=total_fuel, **fields
    )


def make_day(day: str, readings: list[str], **kwargs: object) -> DayRecord:
    """Build an archived day whose readings are given oldest first."""
    entries = [
        make_entry(total_fuel=reading, time=f"{8 + index:02d}:00", date=day)
        for index, reading in enumerate(readings)
    ]
    return DayRecord(date=day, entries=list(reversed(entries)), **kwargs)


POSITION = PositionDraft(
    lat_deg="16", lat_min="55", lat_hem="S", lon_deg="145", lon_min="46", lon_hem="E"
)


def make_state(**kwargs: object) -> CanonicalState:
    kwargs.setdefault("live_day", LiveDay(date="2026-10-19"))
    return CanonicalState(**kwargs)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def repository() -> InMemoryStateRepository:
    return InMemoryStateRepository()


@pytest.fixture
def weather_client() -> FakeWeatherClient:
    return FakeWeatherClient()


@pytest.fixture
def weather_service(
    weather_client: FakeWeatherClient, clock: FixedClock
) -> WeatherService:
    return WeatherService(client=weather_client, clock=clock, cooldown_seconds=300)


@pytest.fixture
def registry(
    repository: InMemoryStateRepository,
    weather_service: WeatherService,
    clock: FixedClock,
    scheduler: ManualScheduler,
) -> LogbookRegistry:
    return LogbookRegistry(
        repository=repository,
        weather_service=weather_service,
        clock=clock,
        scheduler=scheduler,
        save_debounce_seconds=0.7,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        api_token="api-token",
    )


@pytest.fixture
def container(
    settings: Settings,
    clock: FixedClock,
    weather_service: WeatherService,
    registry: LogbookRegistry,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        clock=clock,
        weather_service=weather_service,
        logbooks=registry,
        close_resources=close_resources,
    )
