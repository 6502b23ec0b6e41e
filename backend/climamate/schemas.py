from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from climamate.errors import ValidationError


MAX_CITY_LENGTH = 80
CITY_TOO_LONG_MESSAGE = f"City name must be at most {MAX_CITY_LENGTH} characters"


class WeatherSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    country: str | None = None
    temperature_c: float
    condition_main: str | None = None
    condition_description: str | None = None
    humidity: float | None = Field(default=None, description="Relative humidity in percent.")
    wind_speed: float | None = Field(default=None, description="Wind speed in m/s.")
    icon: str | None = None


class ForecastEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    temperature_c: float
    condition_main: str | None = None
    condition_description: str | None = None
    humidity: float | None = None
    wind_speed: float | None = None
    icon: str | None = None


class ForecastSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    country: str | None = None
    entries: tuple[ForecastEntry, ...] = ()


class CitySuggestion(BaseModel):
    name: str
    country: str | None = None
    state: str | None = None
    latitude: float
    longitude: float


class Notification(BaseModel):
    level: Literal["success", "error", "warning"]
    message: str


class LocationQuery(BaseModel):
    city: str = Field(description="Free-text city name typed by the user.")

    @field_validator("city")
    @classmethod
    def validate_city(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError(ValidationError.user_message)
        if len(value) > MAX_CITY_LENGTH:
            raise ValueError(CITY_TOO_LONG_MESSAGE)
        return value


def parse_location_query(city: str | None) -> str:
    """Return the cleaned city name or raise the weather ValidationError."""
    try:
        return LocationQuery(city=city or "").city
    except PydanticValidationError as exc:
        reason = exc.errors()[0].get("ctx", {}).get("error")
        raise ValidationError(user_message=str(reason) if reason else None) from exc
