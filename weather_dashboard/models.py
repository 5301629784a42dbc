from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


Units = Literal["metric", "imperial"]


# ── Request / response schemas ───────────────────────────────────────────────

class WeatherQuery(BaseModel):
    city: Optional[str] = None
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lon: Optional[float] = Field(None, ge=-180, le=180)
    units: Units = "metric"

    @property
    def has_coords(self) -> bool:
        return self.lat is not None and self.lon is not None

    @property
    def city_name(self) -> Optional[str]:
        if self.city is None or not self.city.strip():
            return None
        return self.city


class ResolvedLocation(BaseModel):
    name: str
    country: str = ""
    state: str = ""
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class CitySuggestion(BaseModel):
    name: str
    country: str = ""
    state: str = ""
    lat: float
    lon: float


class CurrentConditions(BaseModel):
    model_config = ConfigDict(frozen=True)

    temp: int
    feels_like: int
    humidity: int
    wind_speed: float
    description: str
    icon: str
    visibility: Optional[int] = None
    pressure: int
    sunrise: Optional[int] = None
    sunset: Optional[int] = None


class HourlyEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    time: int
    temp: int
    feels_like: int
    icon: str
    description: str
    humidity: int
    wind_speed: float
    pop: int = Field(..., ge=0, le=100)


class DailyEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: int
    high: int
    low: int
    icon: str
    description: str
    pop: int = Field(..., ge=0, le=100)


class AirQualityComponents(BaseModel):
    model_config = ConfigDict(frozen=True)

    co: float
    no2: float
    o3: float
    pm2_5: float
    pm10: float
    so2: float


class AirQualityReading(BaseModel):
    model_config = ConfigDict(frozen=True)

    aqi: int = Field(..., ge=1, le=5)
    components: AirQualityComponents


class WeatherDocument(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    city: str
    country: str = ""
    current: CurrentConditions
    hourly: List[HourlyEntry] = Field(default_factory=list)
    daily: List[DailyEntry] = Field(default_factory=list)
    air_quality: Optional[AirQualityReading] = Field(None, alias="airQuality")


class SearchHistoryCreate(BaseModel):
    city_name: Optional[str] = None
    search_query: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None


class SearchHistoryEntry(BaseModel):
    id: str
    city_name: str
    search_query: str
    lat: Optional[float] = None
    lon: Optional[float] = None
    searched_at: datetime


class ErrorDocument(BaseModel):
    error: str


# ── Upstream (OpenWeatherMap) payloads ───────────────────────────────────────
# Only the fields the dashboard reads are declared; everything else is ignored.

class _Upstream(BaseModel):
    model_config = ConfigDict(extra="ignore")


class GeoMatch(_Upstream):
    name: str
    lat: float
    lon: float
    country: str = ""
    state: Optional[str] = None


class Condition(_Upstream):
    icon: str
    description: str


class Wind(_Upstream):
    speed: float


class CurrentMain(_Upstream):
    temp: float
    feels_like: float
    humidity: int
    pressure: int


class CurrentSys(_Upstream):
    country: Optional[str] = None
    sunrise: Optional[int] = None
    sunset: Optional[int] = None


class UpstreamCurrent(_Upstream):
    main: CurrentMain
    wind: Wind
    weather: List[Condition] = Field(..., min_length=1)
    visibility: Optional[int] = None
    sys: CurrentSys = Field(default_factory=CurrentSys)


class SampleMain(_Upstream):
    temp: float
    feels_like: float
    humidity: int


class ForecastSample(_Upstream):
    dt: int
    main: SampleMain
    wind: Wind
    weather: List[Condition] = Field(..., min_length=1)
    pop: Optional[float] = Field(None, ge=0, le=1)

    @property
    def condition(self) -> Condition:
        return self.weather[0]


class ForecastCity(_Upstream):
    name: Optional[str] = None
    country: Optional[str] = None
    timezone: int = 0


class UpstreamForecast(_Upstream):
    samples: List[ForecastSample] = Field(alias="list")
    city: ForecastCity = Field(default_factory=ForecastCity)


class PollutionMain(_Upstream):
    aqi: int


class PollutionEntry(_Upstream):
    main: PollutionMain
    components: AirQualityComponents


class UpstreamAirPollution(_Upstream):
    entries: List[PollutionEntry] = Field(default_factory=list, alias="list")
