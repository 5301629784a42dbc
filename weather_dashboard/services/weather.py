import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional

from weather_dashboard.errors import InvalidInput, NotFound, UpstreamError, WeatherError
from weather_dashboard.models import (
    AirQualityReading,
    CitySuggestion,
    CurrentConditions,
    ResolvedLocation,
    Units,
    UpstreamAirPollution,
    UpstreamCurrent,
    UpstreamForecast,
    WeatherDocument,
    WeatherQuery,
)
from weather_dashboard.services.forecast import round_half_up, to_daily, to_hourly
from weather_dashboard.services.provider import WeatherProvider

logger = logging.getLogger(__name__)

UNKNOWN_LOCATION = "Unknown Location"
SUGGESTION_LIMIT = 5
SUGGESTION_MIN_CHARS = 2


@dataclass(frozen=True)
class UpstreamBundle:
    current: UpstreamCurrent
    forecast: UpstreamForecast
    air_pollution: UpstreamAirPollution


class WeatherService:
    """Builds a ``WeatherDocument`` from a single upstream provider.

    Holds no per-request state: every call geocodes and fetches afresh.
    """

    def __init__(self, provider: WeatherProvider):
        self.provider = provider

    # ── Geocoding ────────────────────────────────────────────────────────────

    async def resolve_by_name(self, query: str) -> ResolvedLocation:
        if not query or not query.strip():
            raise InvalidInput("City name is required")

        matches = await self.provider.geocode(query, limit=1)
        if not matches:
            logger.info("City not found: %s", query)
            raise NotFound(
                f'City "{query}" not found. Try a different spelling or add country code (e.g., "London, UK")'
            )

        best = matches[0]
        logger.info("Geocoded %r to %s (%s, %s)", query, best.name, best.lat, best.lon)
        return ResolvedLocation(
            name=best.name,
            country=best.country,
            state=best.state or "",
            lat=best.lat,
            lon=best.lon,
        )

    async def resolve_by_coords(self, lat: float, lon: float) -> str:
        """Display name for a coordinate pair; never raises."""
        try:
            matches = await self.provider.reverse_geocode(lat, lon)
        except Exception as exc:
            logger.warning("Reverse geocoding failed for (%s, %s): %s", lat, lon, exc)
            return UNKNOWN_LOCATION
        if not matches or not matches[0].name:
            return UNKNOWN_LOCATION
        return matches[0].name

    async def suggest(self, query: str, limit: int = SUGGESTION_LIMIT) -> List[CitySuggestion]:
        """Search-as-you-type lookup. Degrades to an empty list on any failure."""
        if not query or len(query) < SUGGESTION_MIN_CHARS:
            return []
        try:
            matches = await self.provider.geocode(query, limit=limit)
        except Exception as exc:
            logger.warning("Suggestion lookup failed for %r: %s", query, exc)
            return []
        return [
            CitySuggestion(name=m.name, country=m.country, state=m.state or "", lat=m.lat, lon=m.lon)
            for m in matches
        ]

    # ── Fetching ─────────────────────────────────────────────────────────────

    async def fetch_all(self, lat: float, lon: float, units: Units) -> UpstreamBundle:
        """Fetch current, forecast and air pollution concurrently; all or nothing."""
        try:
            async with asyncio.TaskGroup() as tg:
                current = tg.create_task(self.provider.current_conditions(lat, lon, units))
                forecast = tg.create_task(self.provider.forecast(lat, lon, units))
                air = tg.create_task(self.provider.air_quality(lat, lon))
        except ExceptionGroup as eg:
            # First failure wins; siblings were cancelled by the task group.
            first = eg.exceptions[0]
            message = first.message if isinstance(first, WeatherError) else str(first)
            raise UpstreamError(message or type(first).__name__, status_code=500) from first

        return UpstreamBundle(current=current.result(), forecast=forecast.result(), air_pollution=air.result())

    # ── Assembly ─────────────────────────────────────────────────────────────

    async def assemble(self, query: WeatherQuery) -> WeatherDocument:
        try:
            return await self._assemble(query)
        except WeatherError:
            raise
        except Exception as exc:
            logger.exception("Unexpected failure assembling weather for %s", query)
            raise UpstreamError(str(exc) or "Unknown error") from exc

    async def _assemble(self, query: WeatherQuery) -> WeatherDocument:
        logger.info("Weather request received: city=%s lat=%s lon=%s units=%s",
                    query.city, query.lat, query.lon, query.units)

        location: Optional[ResolvedLocation] = None
        if query.city_name and not query.has_coords:
            location = await self.resolve_by_name(query.city_name)
            lat, lon, city = location.lat, location.lon, location.name
        elif query.has_coords:
            lat, lon = query.lat, query.lon
            city = query.city_name or await self.resolve_by_coords(lat, lon)
        else:
            raise InvalidInput("Provide a city name or both lat and lon")

        logger.info("Fetching weather data for %s (%s, %s)", city, lat, lon)
        bundle = await self.fetch_all(lat, lon, query.units)

        country = bundle.current.sys.country or (location.country if location else "")
        document = WeatherDocument(
            city=city,
            country=country or "",
            current=build_current(bundle.current),
            hourly=to_hourly(bundle.forecast.samples),
            daily=to_daily(bundle.forecast.samples, tz_offset=bundle.forecast.city.timezone),
            air_quality=build_air_quality(bundle.air_pollution),
        )
        logger.info("Weather data fetched successfully for %s", city)
        return document


def build_current(raw: UpstreamCurrent) -> CurrentConditions:
    condition = raw.weather[0]
    return CurrentConditions(
        temp=round_half_up(raw.main.temp),
        feels_like=round_half_up(raw.main.feels_like),
        humidity=raw.main.humidity,
        wind_speed=raw.wind.speed,
        description=condition.description,
        icon=condition.icon,
        visibility=raw.visibility,
        pressure=raw.main.pressure,
        sunrise=raw.sys.sunrise,
        sunset=raw.sys.sunset,
    )


def build_air_quality(raw: UpstreamAirPollution) -> Optional[AirQualityReading]:
    if not raw.entries:
        return None
    first = raw.entries[0]
    # AQI is already on the provider's 1-5 scale.
    return AirQualityReading(aqi=first.main.aqi, components=first.components)
