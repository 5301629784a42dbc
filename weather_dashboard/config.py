from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # App
    app_name: str = "weather-dashboard"
    log_level: str = "INFO"

    # Provider
    openweather_api_key: str
    openweather_base_url: str = "https://api.openweathermap.org/data/2.5"
    openweather_geo_url: str = "https://api.openweathermap.org/geo/1.0"
    # None disables the client timeout; callers bound requests with their own
    openweather_timeout_seconds: Optional[float] = None

    # Redis (search history)
    redis_url: str = "redis://localhost:6379/0"
    history_key: str = "weather:search_history"
    history_max_entries: int = 100
    history_window: int = 10
    history_limit: int = 5


settings = Settings()
