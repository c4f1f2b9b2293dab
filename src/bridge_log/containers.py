"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from bridge_log.adapters.open_meteo_client import HttpxOpenMeteoClient
from bridge_log.adapters.supabase_state_repository import SupabaseStateRepository
from bridge_log.config import Settings
from bridge_log.services.calendar import Clock, SystemClock
from bridge_log.services.logbook import LogbookRegistry
from bridge_log.services.scheduling import AsyncioScheduler
from bridge_log.services.weather import WeatherService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    clock: Clock
    weather_service: WeatherService
    logbooks: LogbookRegistry
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    clock = SystemClock(resolved_settings.timezone)
    state_repository = SupabaseStateRepository(
        supabase_client, table=resolved_settings.state_table
    )
    weather_client = HttpxOpenMeteoClient.create(
        base_url=resolved_settings.weather_base_url,
        marine_base_url=resolved_settings.marine_base_url,
    )
    weather_service = WeatherService(
        client=weather_client,
        clock=clock,
        cooldown_seconds=resolved_settings.weather_cooldown_seconds,
    )
    logbooks = LogbookRegistry(
        repository=state_repository,
        weather_service=weather_service,
        clock=clock,
        scheduler=AsyncioScheduler(),
        save_debounce_seconds=resolved_settings.save_debounce_seconds,
        default_location_label=resolved_settings.default_location_label,
    )

    async def close_resources() -> None:
        await weather_client.close()

    return AppContainer(
        settings=resolved_settings,
        clock=clock,
        weather_service=weather_service,
        logbooks=logbooks,
        close_resources=close_resources,
    )
