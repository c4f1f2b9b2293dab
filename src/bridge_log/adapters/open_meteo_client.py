"""Open-Meteo weather and marine API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

_CURRENT_WEATHER_FIELDS = (
    "temperature_2m",
    "wind_speed_10m",
    "wind_direction_10m",
    "pressure_msl",
    "visibility",
    "weather_code",
    "precipitation",
    "relative_humidity_2m",
    "cloud_cover",
    "dew_point_2m",
)
_CURRENT_MARINE_FIELDS = ("wave_height", "wave_period", "wave_direction")


class WeatherClient(Protocol):
    """Interface for current-conditions lookups."""

    async def fetch_current(self, lat: float, lon: float) -> dict[str, object]:
        """Return raw current weather data for a position."""

    async def fetch_marine(self, lat: float, lon: float) -> dict[str, object]:
        """Return raw current sea-state data for a position."""


@dataclass
class HttpxOpenMeteoClient(WeatherClient):
    """HTTPX-backed Open-Meteo client."""

    base_url: str
    marine_base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, base_url: str, marine_base_url: str) -> "HttpxOpenMeteoClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url,
            marine_base_url=marine_base_url,
            http_client=httpx.AsyncClient(),
        )

    async def fetch_current(self, lat: float, lon: float) -> dict[str, object]:
        """Fetch current weather with wind in knots."""
        response = await self.http_client.get(
            f"{self.base_url}/forecast",
            params={
                "latitude": lat,
                "longitude": lon,
                "current": ",".join(_CURRENT_WEATHER_FIELDS),
                "wind_speed_unit": "kn",
                "timezone": "auto",
            },
            timeout=15,
        )
        response.raise_for_status()
        return response.json()

    async def fetch_marine(self, lat: float, lon: float) -> dict[str, object]:
        """Fetch current wave height, period and direction."""
        response = await self.http_client.get(
            f"{self.marine_base_url}/marine",
            params={
                "latitude": lat,
                "longitude": lon,
                "current": ",".join(_CURRENT_MARINE_FIELDS),
                "timezone": "auto",
            },
            timeout=15,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
