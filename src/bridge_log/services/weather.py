"""Weather snapshots for the live day, throttled per ledger."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from bridge_log.adapters.open_meteo_client import WeatherClient
from bridge_log.domain.logbook import WeatherSnapshot
from bridge_log.services.calendar import Clock

_logger = logging.getLogger(__name__)

WMO_CONDITIONS: dict[int, str] = {
    0: "Clear",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Drizzle",
    55: "Dense drizzle",
    56: "Freezing drizzle",
    57: "Dense freezing drizzle",
    61: "Light rain",
    63: "Rain",
    65: "Heavy rain",
    66: "Freezing rain",
    67: "Heavy freezing rain",
    71: "Light snow",
    73: "Snow",
    75: "Heavy snow",
    77: "Snow grains",
    80: "Rain showers",
    81: "Rain showers",
    82: "Violent rain showers",
    85: "Snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm w/ hail",
    99: "Severe thunderstorm w/ hail",
}


@dataclass
class WeatherService:
    """Fetches weather snapshots, at most once per cool-down per identity."""

    client: WeatherClient
    clock: Clock
    cooldown_seconds: float = 300.0
    _last_attempt: dict[str, datetime] = field(default_factory=dict, repr=False)

    def is_throttled(self, identity: str) -> bool:
        last = self._last_attempt.get(identity)
        if last is None:
            return False
        return self.clock.now() - last < timedelta(seconds=self.cooldown_seconds)

    async def fetch(
        self, identity: str, lat: float, lon: float
    ) -> WeatherSnapshot | None:
        """Return a fresh snapshot, or ``None`` while the cool-down is running.

        Errors from the weather lookup propagate; a failed marine lookup only
        leaves the wave fields empty.
        """
        if self.is_throttled(identity):
            _logger.info("Weather refresh throttled for %s", identity)
            return None
        self._last_attempt[identity] = self.clock.now()

        payload = await self.client.fetch_current(lat, lon)
        snapshot = _weather_snapshot(_current(payload))
        try:
            marine = await self.client.fetch_marine(lat, lon)
        except Exception as exc:
            _logger.warning("Marine weather lookup failed: %s", exc)
        else:
            snapshot.update(_marine_snapshot(_current(marine)))
        return snapshot


def _current(payload: object) -> dict[str, object]:
    if not isinstance(payload, dict):
        return {}
    current = payload.get("current")
    return current if isinstance(current, dict) else {}


def _number(value: object) -> float | int | None:
    if isinstance(value, int | float) and not isinstance(value, bool):
        return value
    return None


def _weather_snapshot(current: dict[str, object]) -> WeatherSnapshot:
    visibility_m = _number(current.get("visibility"))
    code = _number(current.get("weather_code"))
    return {
        "tempC": _number(current.get("temperature_2m")),
        "windKts": _number(current.get("wind_speed_10m")),
        "windDir": _number(current.get("wind_direction_10m")),
        "pressure": _number(current.get("pressure_msl")),
        "visibilityKm": visibility_m / 1000 if visibility_m is not None else None,
        "weatherCode": code,
        "condition": WMO_CONDITIONS.get(int(code)) if code is not None else None,
        "precipMmHr": _number(current.get("precipitation")),
        "humidityPct": _number(current.get("relative_humidity_2m")),
        "cloudPct": _number(current.get("cloud_cover")),
        "dewPointC": _number(current.get("dew_point_2m")),
        "waveHeightM": None,
        "wavePeriodS": None,
        "waveDirDeg": None,
    }


def _marine_snapshot(current: dict[str, object]) -> WeatherSnapshot:
    return {
        "waveHeightM": _number(current.get("wave_height")),
        "wavePeriodS": _number(current.get("wave_period")),
        "waveDirDeg": _number(current.get("wave_direction")),
    }
