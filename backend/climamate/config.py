from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    app_name: str = "ClimaMate"
    app_version: str = "1.0.0"
    openweather_api_key: str = ""
    openweather_base_url: str = "https://api.openweathermap.org"
    openweather_icon_url: str = "https://openweathermap.org/img/wn"
    units: str = "metric"
    landing_city: str = "Lagos"
    trivia_interval_seconds: float = 5.0
    suggestion_limit: int = 5
    request_timeout_seconds: float = 12.0
    log_level: str = "INFO"
    frontend_origins: tuple[str, ...] = ("http://localhost:5173", "http://127.0.0.1:5173")

    @property
    def current_weather_url(self) -> str:
        return f"{self.openweather_base_url}/data/2.5/weather"

    @property
    def forecast_url(self) -> str:
        return f"{self.openweather_base_url}/data/2.5/forecast"

    @property
    def geocoding_url(self) -> str:
        return f"{self.openweather_base_url}/geo/1.0/direct"


def get_settings() -> Settings:
    api_key_raw = os.getenv("OPENWEATHER_API_KEY", "").strip()
    base_url_raw = os.getenv("OPENWEATHER_BASE_URL", "").strip()
    landing_city_raw = os.getenv("LANDING_CITY", "").strip()
    trivia_interval_raw = os.getenv("TRIVIA_INTERVAL_SECONDS", "").strip()
    timeout_raw = os.getenv("REQUEST_TIMEOUT_SECONDS", "").strip()
    suggestion_limit_raw = os.getenv("SUGGESTION_LIMIT", "").strip()
    log_level_raw = os.getenv("LOG_LEVEL", "").strip()
    origins_raw = os.getenv("FRONTEND_ORIGINS", "").strip()

    parsed_origins = tuple(item.strip() for item in origins_raw.split(",") if item.strip())

    try:
        trivia_interval_seconds = float(trivia_interval_raw) if trivia_interval_raw else 5.0
    except ValueError:
        trivia_interval_seconds = 5.0

    try:
        request_timeout_seconds = float(timeout_raw) if timeout_raw else 12.0
    except ValueError:
        request_timeout_seconds = 12.0

    try:
        suggestion_limit = int(suggestion_limit_raw) if suggestion_limit_raw else 5
    except ValueError:
        suggestion_limit = 5

    return Settings(
        openweather_api_key=api_key_raw,
        openweather_base_url=base_url_raw.rstrip("/") or Settings.openweather_base_url,
        landing_city=landing_city_raw or Settings.landing_city,
        trivia_interval_seconds=max(1.0, trivia_interval_seconds),
        request_timeout_seconds=max(1.0, request_timeout_seconds),
        suggestion_limit=min(10, max(1, suggestion_limit)),
        log_level=log_level_raw.upper() or Settings.log_level,
        frontend_origins=parsed_origins or Settings.frontend_origins,
    )
