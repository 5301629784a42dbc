import logging
from typing import List, Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse

from weather_dashboard.config import settings
from weather_dashboard.errors import WeatherError
from weather_dashboard.models import (
    CitySuggestion,
    SearchHistoryCreate,
    SearchHistoryEntry,
    WeatherDocument,
    WeatherQuery,
)
from weather_dashboard.services.history import SearchHistoryStore
from weather_dashboard.services.openweather import OpenWeatherClient
from weather_dashboard.services.weather import WeatherService

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)

ow = OpenWeatherClient(
    settings.openweather_base_url,
    settings.openweather_api_key,
    settings.openweather_geo_url,
    timeout_seconds=settings.openweather_timeout_seconds,
)
service = WeatherService(ow)
history = SearchHistoryStore(settings.redis_url, settings.history_key, settings.history_max_entries)


@app.exception_handler(WeatherError)
async def weather_error_handler(request: Request, exc: WeatherError):
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.get("/health")
def health():
    return {"status": "ok", "service": settings.app_name}


@app.get("/")
def root():
    return JSONResponse({"service": settings.app_name, "docs": "/docs"})


# ── Weather ──────────────────────────────────────────────────────────────────

@app.get("/v1/weather", response_model=WeatherDocument)
async def weather(
    city: Optional[str] = Query(None, description="City name, e.g. 'London' or 'London, UK'"),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lon: Optional[float] = Query(None, ge=-180, le=180),
    units: str = Query("metric", pattern="^(metric|imperial)$"),
):
    query = WeatherQuery(city=city, lat=lat, lon=lon, units=units)
    return await service.assemble(query)


@app.post("/v1/weather", response_model=WeatherDocument)
async def weather_from_body(query: WeatherQuery):
    return await service.assemble(query)


@app.get("/v1/geocode", response_model=List[CitySuggestion])
async def geocode(q: str = Query("", description="Partial city name")):
    return await service.suggest(q)


# ── Search history ───────────────────────────────────────────────────────────

@app.get("/v1/history", response_model=List[SearchHistoryEntry])
def list_history():
    return history.list_recent(limit=settings.history_limit, window=settings.history_window)


@app.post("/v1/history", response_model=SearchHistoryEntry)
def add_history(payload: SearchHistoryCreate):
    return history.append(payload)


@app.delete("/v1/history")
def clear_history():
    history.clear()
    return {"success": True}
