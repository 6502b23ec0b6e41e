from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import httpx

from climamate.config import Settings
from climamate.errors import AuthError, TransientError, error_for_status
from climamate.schemas import CitySuggestion, ForecastEntry, ForecastSnapshot, WeatherSnapshot


logger = logging.getLogger(__name__)


@dataclass
class WeatherClient:
    """Read-only OpenWeatherMap client.

    The API key comes from the injected settings, so tests can run the client
    against fixture credentials and a mock transport.
    """

    settings: Settings
    transport: httpx.AsyncBaseTransport | None = None
    _client: httpx.AsyncClient = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._client = httpx.AsyncClient(
            timeout=self.settings.request_timeout_seconds,
            transport=self.transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def fetch_current(self, city: str) -> WeatherSnapshot:
        payload = await self._get_json(
            url=self.settings.current_weather_url,
            params={"q": city, "units": self.settings.units},
        )
        return normalize_current(payload)

    async def fetch_forecast(self, city: str) -> ForecastSnapshot:
        payload = await self._get_json(
            url=self.settings.forecast_url,
            params={"q": city, "units": self.settings.units},
        )
        return normalize_forecast(payload)

    async def suggest_cities(self, query: str) -> list[CitySuggestion]:
        query = query.strip()
        if not query:
            return []

        payload = await self._get_json(
            url=self.settings.geocoding_url,
            params={"q": query, "limit": self.settings.suggestion_limit},
        )
        if not isinstance(payload, list):
            return []

        suggestions: list[CitySuggestion] = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            latitude = _as_float(item.get("lat"))
            longitude = _as_float(item.get("lon"))
            if not item.get("name") or latitude is None or longitude is None:
                continue
            suggestions.append(
                CitySuggestion(
                    name=item["name"],
                    country=item.get("country"),
                    state=item.get("state"),
                    latitude=latitude,
                    longitude=longitude,
                )
            )
        return suggestions

    async def _get_json(self, *, url: str, params: dict[str, Any]) -> Any:
        api_key = self.settings.openweather_api_key
        if not api_key:
            raise AuthError("No OpenWeatherMap API key configured.")

        try:
            response = await self._client.get(url, params={**params, "appid": api_key})
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            raise error_for_status(status_code, _provider_message(exc.response)) from exc
        except httpx.RequestError as exc:
            raise TransientError(f"Weather provider unreachable: {exc}") from exc
        except ValueError as exc:
            raise TransientError("Weather provider returned malformed JSON.") from exc


def normalize_current(payload: Any) -> WeatherSnapshot:
    if not isinstance(payload, dict):
        raise TransientError("Unexpected current weather payload.")

    main = payload.get("main") or {}
    temperature = _as_float(main.get("temp"))
    name = payload.get("name")
    if temperature is None or not name:
        raise TransientError("Current weather payload is missing name or temperature.")

    condition = _first_condition(payload)
    return WeatherSnapshot(
        name=name,
        country=(payload.get("sys") or {}).get("country"),
        temperature_c=temperature,
        condition_main=condition.get("main"),
        condition_description=condition.get("description"),
        humidity=_as_float(main.get("humidity")),
        wind_speed=_as_float((payload.get("wind") or {}).get("speed")),
        icon=condition.get("icon"),
    )


def normalize_forecast(payload: Any) -> ForecastSnapshot:
    if not isinstance(payload, dict):
        raise TransientError("Unexpected forecast payload.")

    city = payload.get("city") or {}
    name = city.get("name")
    if not name:
        raise TransientError("Forecast payload is missing the city name.")

    entries: list[ForecastEntry] = []
    for item in payload.get("list") or []:
        if not isinstance(item, dict):
            continue
        timestamp = _as_timestamp(item.get("dt"))
        temperature = _as_float((item.get("main") or {}).get("temp"))
        if timestamp is None or temperature is None:
            logger.debug("Skipping forecast entry without dt or temperature: %s", item)
            continue

        condition = _first_condition(item)
        entries.append(
            ForecastEntry(
                timestamp=timestamp,
                temperature_c=temperature,
                condition_main=condition.get("main"),
                condition_description=condition.get("description"),
                humidity=_as_float((item.get("main") or {}).get("humidity")),
                wind_speed=_as_float((item.get("wind") or {}).get("speed")),
                icon=condition.get("icon"),
            )
        )

    entries.sort(key=lambda entry: entry.timestamp)
    return ForecastSnapshot(name=name, country=city.get("country"), entries=tuple(entries))


def _first_condition(payload: dict) -> dict:
    conditions = payload.get("weather")
    if isinstance(conditions, list) and conditions and isinstance(conditions[0], dict):
        return conditions[0]
    return {}


def _provider_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return None


def _as_float(value: object) -> float | None:
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    # NaN and Infinity parse fine but cannot be displayed
    return parsed if math.isfinite(parsed) else None


def _as_int(value: object) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def _as_timestamp(value: object) -> datetime | None:
    stamp = _as_int(value)
    if stamp is None:
        return None
    try:
        return datetime.fromtimestamp(stamp, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
