import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from weather_dashboard.errors import UpstreamError
from weather_dashboard.models import (
    GeoMatch,
    Units,
    UpstreamAirPollution,
    UpstreamCurrent,
    UpstreamForecast,
)

logger = logging.getLogger(__name__)

INVALID_KEY_MESSAGE = "Invalid API key or API not activated yet. New keys take ~10 minutes to activate."

_geo_matches = TypeAdapter(List[GeoMatch])

M = TypeVar("M", bound=BaseModel)


class OpenWeatherClient:
    """OpenWeatherMap implementation of ``WeatherProvider``.

    Endpoints used:
    - Geocoding:       /geo/1.0/direct, /geo/1.0/reverse
    - Current weather: /data/2.5/weather
    - 5-day forecast:  /data/2.5/forecast (3-hour steps)
    - Air pollution:   /data/2.5/air_pollution
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        geo_url: str = "https://api.openweathermap.org/geo/1.0",
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.geo_url = geo_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout_seconds
        self.transport = transport

    async def geocode(self, query: str, limit: int = 1) -> List[GeoMatch]:
        url = f"{self.geo_url}/direct"
        data = await self._get_json(
            url,
            {"q": query, "limit": limit},
            what="Geocoding",
            error_status=400,
            non_json_message=INVALID_KEY_MESSAGE,
        )
        return self._validate_list(data, "geocoding")

    async def reverse_geocode(self, lat: float, lon: float) -> List[GeoMatch]:
        url = f"{self.geo_url}/reverse"
        data = await self._get_json(url, {"lat": lat, "lon": lon, "limit": 1}, what="Reverse geocoding")
        return self._validate_list(data, "reverse geocoding")

    async def current_conditions(self, lat: float, lon: float, units: Units) -> UpstreamCurrent:
        url = f"{self.base_url}/weather"
        data = await self._get_json(url, {"lat": lat, "lon": lon, "units": units}, what="Current weather")
        return self._validate(UpstreamCurrent, data, "current weather")

    async def forecast(self, lat: float, lon: float, units: Units) -> UpstreamForecast:
        url = f"{self.base_url}/forecast"
        data = await self._get_json(url, {"lat": lat, "lon": lon, "units": units}, what="Forecast")
        return self._validate(UpstreamForecast, data, "forecast")

    async def air_quality(self, lat: float, lon: float) -> UpstreamAirPollution:
        # Concentrations are unit-independent (µg/m³), so no units parameter.
        url = f"{self.base_url}/air_pollution"
        data = await self._get_json(url, {"lat": lat, "lon": lon}, what="Air pollution")
        return self._validate(UpstreamAirPollution, data, "air pollution")

    async def _get_json(
        self,
        url: str,
        params: Dict[str, Any],
        *,
        what: str,
        error_status: int = 500,
        non_json_message: Optional[str] = None,
    ) -> Any:
        params = {**params, "appid": self.api_key}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                r = await client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise UpstreamError(f"{what} request failed: {exc}", status_code=error_status) from exc

        try:
            data = r.json()
        except ValueError as exc:
            logger.error("%s returned a non-JSON body (status %s)", what, r.status_code)
            raise UpstreamError(
                non_json_message or f"{what} returned a non-JSON response",
                status_code=error_status,
            ) from exc

        # The provider reports errors as {"cod": <code>, "message": ...}; the
        # forecast endpoint sends its success code as the string "200".
        if isinstance(data, dict) and str(data.get("cod", 200)) != "200":
            logger.info("%s API error: %s", what, data.get("message"))
            raise UpstreamError(data.get("message") or "API error occurred", status_code=error_status)

        if r.is_error:
            raise UpstreamError(f"{what} failed ({r.status_code})", status_code=error_status)
        return data

    @staticmethod
    def _validate(model: Type[M], data: Any, what: str) -> M:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise UpstreamError(f"Malformed {what} payload: {exc.error_count()} invalid field(s)") from exc

    @staticmethod
    def _validate_list(data: Any, what: str) -> List[GeoMatch]:
        try:
            return _geo_matches.validate_python(data)
        except ValidationError as exc:
            raise UpstreamError(f"Malformed {what} payload", status_code=400) from exc
