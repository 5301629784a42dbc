"""
Shared fixtures. Upstream calls go through a stub provider so no live
OpenWeather or Redis connection is needed.
"""
import os

# Minimal env so pydantic-settings doesn't require a real .env file
os.environ.setdefault("OPENWEATHER_API_KEY", "test-key")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/0")

import copy

import pytest

from weather_dashboard.models import (
    GeoMatch,
    UpstreamAirPollution,
    UpstreamCurrent,
    UpstreamForecast,
)

DAY = 86_400
# 2023-11-14 00:00:00 UTC
MIDNIGHT = 1_699_920_000

SAMPLE_CURRENT = {
    "name": "London",
    "sys": {"country": "GB", "sunrise": 1699945200, "sunset": 1699978000},
    "dt": 1699950000,
    "visibility": 10000,
    "weather": [{"id": 800, "main": "Clear", "description": "clear sky", "icon": "01d"}],
    "main": {"temp": 15.5, "feels_like": 14.4, "temp_min": 13.0, "temp_max": 17.0, "pressure": 1013, "humidity": 60},
    "wind": {"speed": 3.5},
    "cod": 200,
}


def make_sample(dt, temp, pop=0.0, icon="01d", description="clear sky"):
    return {
        "dt": dt,
        "main": {"temp": temp, "feels_like": temp - 1, "humidity": 70},
        "wind": {"speed": 4.1},
        "weather": [{"icon": icon, "description": description}],
        "pop": pop,
    }


def make_forecast(days=5, per_day=8, start=MIDNIGHT):
    items = []
    for step in range(days * per_day):
        dt = start + step * (DAY // per_day)
        items.append(make_sample(dt, temp=10 + (step % per_day), pop=(step % per_day) / 10))
    return {"cod": "200", "city": {"name": "London", "country": "GB", "timezone": 0}, "list": items}


SAMPLE_AIR = {
    "coord": {"lon": -0.1278, "lat": 51.5074},
    "list": [
        {
            "main": {"aqi": 2},
            "components": {
                "co": 230.31, "no": 0.1, "no2": 12.5, "o3": 61.2,
                "so2": 1.9, "pm2_5": 4.4, "pm10": 6.1, "nh3": 0.5,
            },
            "dt": 1699950000,
        }
    ],
}

SAMPLE_GEO = [{"lat": 51.5074, "lon": -0.1278, "name": "London", "country": "GB", "state": "England"}]


class StubProvider:
    """In-memory WeatherProvider. Set ``fail_<capability>`` to an exception to raise it."""

    def __init__(self, geo=None, reverse=None, current=None, forecast=None, air=None):
        self.geo = SAMPLE_GEO if geo is None else geo
        self.reverse = SAMPLE_GEO if reverse is None else reverse
        self.current = current or SAMPLE_CURRENT
        self.forecast_payload = forecast or make_forecast()
        self.air = SAMPLE_AIR if air is None else air
        self.calls = []
        self.failures = {}

    def fail(self, capability, exc):
        self.failures[capability] = exc
        return self

    def _record(self, capability, *args):
        self.calls.append((capability,) + args)
        if capability in self.failures:
            raise self.failures[capability]

    async def geocode(self, query, limit=1):
        self._record("geocode", query, limit)
        return [GeoMatch.model_validate(m) for m in self.geo[:limit]]

    async def reverse_geocode(self, lat, lon):
        self._record("reverse_geocode", lat, lon)
        return [GeoMatch.model_validate(m) for m in self.reverse[:1]]

    async def current_conditions(self, lat, lon, units):
        self._record("current_conditions", lat, lon, units)
        return UpstreamCurrent.model_validate(copy.deepcopy(self.current))

    async def forecast(self, lat, lon, units):
        self._record("forecast", lat, lon, units)
        return UpstreamForecast.model_validate(copy.deepcopy(self.forecast_payload))

    async def air_quality(self, lat, lon):
        self._record("air_quality", lat, lon)
        return UpstreamAirPollution.model_validate(copy.deepcopy(self.air))


@pytest.fixture()
def provider():
    return StubProvider()
