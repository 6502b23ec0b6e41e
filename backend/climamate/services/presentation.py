"""Display rules shared by the landing and home pages.

Everything here is pure: suggestion text, icon and theme selection, the
greeting line, trivia facts and the view models the templates render.
"""

from __future__ import annotations

import math
from typing import Literal

from climamate.schemas import ForecastEntry, ForecastSnapshot, Notification, WeatherSnapshot


PageKind = Literal["landing", "home"]

SUGGESTIONS: dict[str, dict[str, str]] = {
    "home": {
        "rain": "Carry an umbrella today 🌧️",
        "hot": "Stay hydrated, it's quite hot ☀️",
        "cold": "Wear a warm jacket, it's chilly 🧥",
        "generic": "Weather looks great for your day! 😊",
    },
    "landing": {
        "rain": "Don't forget your umbrella today!",
        "hot": "Stay hydrated, it's quite hot today.",
        "cold": "Wear a jacket, it's chilly.",
        "generic": "It's a great day to be productive!",
    },
}

HOT_THRESHOLD_C = 30
COLD_THRESHOLD_C = 15

LANDING_FACTS: tuple[str, ...] = (
    "Raindrops can fall at speeds of about 22 mph.",
    "Lightning is five times hotter than the sun’s surface.",
    "Snowflakes can take up to an hour to reach the ground.",
    "The highest temperature ever recorded was 56.7°C in Death Valley, USA.",
    "The coldest temperature recorded was -89.2°C in Antarctica.",
)

HOME_FACTS: tuple[str, ...] = (
    "Raindrops can fall at speeds of about 22 mph.",
    "Lightning is five times hotter than the sun’s surface.",
    "The coldest temperature recorded was -89.2°C in Antarctica.",
    "Snowflakes can take up to an hour to reach the ground.",
)

FACTS_BY_PAGE: dict[str, tuple[str, ...]] = {"landing": LANDING_FACTS, "home": HOME_FACTS}

THEMES = {
    "Clear": "theme-clear",
    "Rain": "theme-rain",
    "Clouds": "theme-clouds",
}
DEFAULT_THEME = "theme-default"

ICON_URL_TEMPLATE = "{base}/{icon}@4x.png"


def get_suggestion(temperature: float | None, description: str | None, page: PageKind = "home") -> str:
    """Map a temperature and condition description to a short recommendation.

    Rules are checked top to bottom and the first match wins: rain beats any
    temperature, then strictly above 30°C, then strictly below 15°C.
    """
    if temperature is None or not description:
        return ""
    messages = SUGGESTIONS[page]
    if "rain" in description:
        return messages["rain"]
    if temperature > HOT_THRESHOLD_C:
        return messages["hot"]
    if temperature < COLD_THRESHOLD_C:
        return messages["cold"]
    return messages["generic"]


def icon_category(condition_main: str | None) -> str:
    if not condition_main:
        return "other"
    condition = condition_main.lower()
    if "clear" in condition:
        return "clear"
    if "rain" in condition or "drizzle" in condition:
        return "rain"
    if "cloud" in condition:
        return "cloud"
    return "other"


def theme_for_condition(condition_main: str | None) -> str:
    return THEMES.get(condition_main or "", DEFAULT_THEME)


def icon_url(icon: str | None, base_url: str) -> str:
    if not icon:
        return ""
    return ICON_URL_TEMPLATE.format(base=base_url.rstrip("/"), icon=icon)


def round_temperature(value: float) -> int:
    # half-up, so 28.5 -> 29 and -2.5 -> -2
    return int(math.floor(value + 0.5))


def format_temperature(value: float) -> str:
    return f"{round_temperature(value)}°C"


def greeting_for_hour(hour: int, weather: WeatherSnapshot | None = None) -> str:
    if hour < 6:
        greeting = "Good evening"
    elif hour < 12:
        greeting = "Good morning"
    elif hour < 18:
        greeting = "Good afternoon"
    else:
        greeting = "Good evening"

    if weather is not None:
        description = weather.condition_description or ""
        greeting += f" | {weather.name}: {format_temperature(weather.temperature_c)}, {description}"
    return greeting


def daily_outlook(forecast: ForecastSnapshot) -> list[ForecastEntry]:
    """Pick one entry per calendar day (UTC), the one closest to midday."""
    by_day: dict = {}
    for entry in forecast.entries:
        by_day.setdefault(entry.timestamp.date(), []).append(entry)

    def distance_from_noon(entry: ForecastEntry) -> int:
        return abs(entry.timestamp.hour * 60 + entry.timestamp.minute - 12 * 60)

    return [min(entries, key=distance_from_noon) for entries in by_day.values()]


def build_weather_card(weather: WeatherSnapshot, *, page: PageKind, icon_base_url: str) -> dict:
    return {
        "name": weather.name,
        "country": weather.country,
        "location_label": f"{weather.name}, {weather.country}" if weather.country else weather.name,
        "temperature_c": weather.temperature_c,
        "temperature_label": format_temperature(weather.temperature_c),
        "condition_main": weather.condition_main,
        "description": weather.condition_description,
        "humidity_label": f"Humidity: {_fmt_number(weather.humidity)}%",
        "wind_label": f"Wind: {_fmt_number(weather.wind_speed)} m/s",
        "icon_category": icon_category(weather.condition_main),
        "icon_url": icon_url(weather.icon, icon_base_url),
        "suggestion": get_suggestion(weather.temperature_c, weather.condition_description, page),
    }


def build_forecast_cards(forecast: ForecastSnapshot, *, icon_base_url: str) -> list[dict]:
    return [
        {
            "timestamp": entry.timestamp.isoformat(),
            "day_label": entry.timestamp.strftime("%a %d %b"),
            "temperature_label": format_temperature(entry.temperature_c),
            "description": entry.condition_description,
            "icon_category": icon_category(entry.condition_main),
            "icon_url": icon_url(entry.icon, icon_base_url),
        }
        for entry in daily_outlook(forecast)
    ]


def render_page(
    *,
    page: PageKind,
    weather: WeatherSnapshot | None,
    forecast: ForecastSnapshot | None,
    loading: bool,
    trivia_index: int,
    notifications: list[Notification] | tuple[Notification, ...] = (),
    dark_mode: bool = False,
    hour: int = 12,
    icon_base_url: str = "https://openweathermap.org/img/wn",
) -> dict:
    """Project the current page state onto the view model the templates use."""
    facts = FACTS_BY_PAGE[page]

    if forecast is None:
        forecast_state = "absent"
        forecast_cards: list[dict] = []
    elif not forecast.entries:
        forecast_state = "empty"
        forecast_cards = []
    else:
        forecast_state = "ready"
        forecast_cards = build_forecast_cards(forecast, icon_base_url=icon_base_url)

    return {
        "page": page,
        "loading": loading,
        "dark_mode": dark_mode,
        "theme": theme_for_condition(weather.condition_main if weather else None),
        "greeting": greeting_for_hour(hour, weather),
        "weather": build_weather_card(weather, page=page, icon_base_url=icon_base_url) if weather else None,
        "forecast_state": forecast_state,
        "forecast": forecast_cards,
        "trivia": facts[trivia_index % len(facts)],
        "notifications": [notification.model_dump() for notification in notifications],
    }


def _fmt_number(value: float | None, fallback: str = "N/A") -> str:
    if value is None:
        return fallback
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"
