from typing import List, Protocol

from weather_dashboard.models import (
    GeoMatch,
    Units,
    UpstreamAirPollution,
    UpstreamCurrent,
    UpstreamForecast,
)


class WeatherProvider(Protocol):
    """Capabilities the dashboard needs from an upstream weather service.

    Implementations return validated payloads and raise ``UpstreamError`` for
    transport failures, provider error documents and malformed bodies.
    """

    async def geocode(self, query: str, limit: int = 1) -> List[GeoMatch]: ...

    async def reverse_geocode(self, lat: float, lon: float) -> List[GeoMatch]: ...

    async def current_conditions(self, lat: float, lon: float, units: Units) -> UpstreamCurrent: ...

    async def forecast(self, lat: float, lon: float, units: Units) -> UpstreamForecast: ...

    async def air_quality(self, lat: float, lon: float) -> UpstreamAirPollution: ...
