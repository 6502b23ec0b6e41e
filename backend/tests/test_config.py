from climamate.config import Settings, get_settings


def test_defaults_without_environment(monkeypatch) -> None:
    for name in (
        "OPENWEATHER_API_KEY",
        "OPENWEATHER_BASE_URL",
        "LANDING_CITY",
        "TRIVIA_INTERVAL_SECONDS",
        "REQUEST_TIMEOUT_SECONDS",
        "SUGGESTION_LIMIT",
        "LOG_LEVEL",
        "FRONTEND_ORIGINS",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = get_settings()

    assert settings == Settings()
    assert settings.openweather_api_key == ""
    assert settings.units == "metric"
    assert settings.current_weather_url == "https://api.openweathermap.org/data/2.5/weather"


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("OPENWEATHER_API_KEY", " secret ")
    monkeypatch.setenv("OPENWEATHER_BASE_URL", "http://weather.local/")
    monkeypatch.setenv("LANDING_CITY", "Abuja")
    monkeypatch.setenv("TRIVIA_INTERVAL_SECONDS", "8")
    monkeypatch.setenv("SUGGESTION_LIMIT", "3")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("FRONTEND_ORIGINS", "http://a.test, http://b.test")

    settings = get_settings()

    assert settings.openweather_api_key == "secret"
    assert settings.forecast_url == "http://weather.local/data/2.5/forecast"
    assert settings.geocoding_url == "http://weather.local/geo/1.0/direct"
    assert settings.landing_city == "Abuja"
    assert settings.trivia_interval_seconds == 8.0
    assert settings.suggestion_limit == 3
    assert settings.log_level == "DEBUG"
    assert settings.frontend_origins == ("http://a.test", "http://b.test")


def test_invalid_numbers_fall_back_and_clamp(monkeypatch) -> None:
    monkeypatch.setenv("TRIVIA_INTERVAL_SECONDS", "soon")
    monkeypatch.setenv("REQUEST_TIMEOUT_SECONDS", "0")
    monkeypatch.setenv("SUGGESTION_LIMIT", "50")

    settings = get_settings()

    assert settings.trivia_interval_seconds == 5.0
    assert settings.request_timeout_seconds == 1.0
    assert settings.suggestion_limit == 10
